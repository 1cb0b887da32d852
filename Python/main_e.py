import sys

from bitio import CompressorBitio
from huff import COMPRESSION_NAME, USAGE, HuffException, expand_file
from main_c import parse_debug_level, short_program_name, track_performance


def main(argv=None) -> int:
    arguments = sys.argv if argv is None else argv
    if len(arguments) < 3:
        print(f"\nUsage:  {short_program_name(arguments[0])} {USAGE}")
        return 1

    debug = parse_debug_level(arguments[3:])
    try:
        with CompressorBitio.BitFile.open_input_bit_file(arguments[1], pacifier=True) as input_file, \
                CompressorBitio.BitFile.open_output_bit_file(arguments[2]) as output_file:
            print(f"\nDecompressing {arguments[1]} to {arguments[2]}")
            print(f"Using {COMPRESSION_NAME}\n")
            track_performance("ExpandFile", expand_file, input_file, output_file, debug)
    except FileNotFoundError:
        print(f"Error: Input file '{arguments[1]}' not found.")
        return 1
    except HuffException as e:
        print(f"Error: {e}")
        return 2
    except Exception as e:
        print(f"An error occurred: {e}")
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
