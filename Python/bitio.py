import sys
from io import SEEK_SET
from typing import BinaryIO


class CompressorBitio:
    PACIFIER_COUNT = 2047

    class BitFile:
        def __init__(self, stream: BinaryIO, input_mode: bool, pacifier: bool = False, owns_stream: bool = False):
            self.is_input = input_mode
            self.file_stream: BinaryIO = stream
            self.owns_stream = owns_stream
            self.pacifier = pacifier
            self.rack: int = 0
            self.mask: int = 0x80
            self.pacifier_counter: int = 0
            self.bits_read: int = 0
            self.bits_written: int = 0
            self.closed: bool = False

        @staticmethod
        def open_output_bit_file(name: str, pacifier: bool = False) -> 'CompressorBitio.BitFile':
            return CompressorBitio.BitFile(open(name, "wb"), False, pacifier, owns_stream=True)

        @staticmethod
        def open_input_bit_file(name: str, pacifier: bool = False) -> 'CompressorBitio.BitFile':
            return CompressorBitio.BitFile(open(name, "rb"), True, pacifier, owns_stream=True)

        def __enter__(self) -> 'CompressorBitio.BitFile':
            return self

        def __exit__(self, exc_type, exc_value, traceback):
            self.close_bit_file()
            return False

        def close_bit_file(self):
            if self.closed:
                return
            self.closed = True
            try:
                if not self.is_input and self.mask != 0x80:
                    self._write_rack()
                if not self.is_input:
                    self.file_stream.flush()
            finally:
                if self.owns_stream:
                    self.file_stream.close()

        def reset(self):
            """Rewind to the first bit of the stream."""
            if not self.is_input:
                raise ValueError("reset() is only valid on an input BitFile")
            self.file_stream.seek(0, SEEK_SET)
            self.rack = 0
            self.mask = 0x80

        def _tick(self):
            self.pacifier_counter += 1
            if self.pacifier and (self.pacifier_counter & CompressorBitio.PACIFIER_COUNT) == 0:
                sys.stdout.write(".")
                sys.stdout.flush()

        def _write_rack(self):
            try:
                self.file_stream.write(bytes([self.rack]))
            except IOError as e:
                raise IOError(f"Fatal error in OutputBit! {e}") from e
            self._tick()

        def _read_rack(self):
            read = self.file_stream.read(1)
            if not read:
                raise EOFError("End of bit stream reached")
            self.rack = read[0]
            self._tick()

        def output_bit(self, bit: int):
            if bit != 0:
                self.rack |= self.mask
            self.mask >>= 1
            self.bits_written += 1
            if self.mask == 0:
                self._write_rack()
                self.rack = 0
                self.mask = 0x80

        def output_bits(self, code: int, count: int):
            # Writes the low `count` bits of code, most significant first.
            if count <= 0:
                return
            mask_code: int = 1 << (count - 1)
            while mask_code != 0:
                if (mask_code & code) != 0:
                    self.rack |= self.mask
                self.mask >>= 1
                self.bits_written += 1
                if self.mask == 0:
                    self._write_rack()
                    self.rack = 0
                    self.mask = 0x80
                mask_code >>= 1

        def input_bit(self) -> int:
            if self.mask == 0x80:
                self._read_rack()
            value = self.rack & self.mask
            self.mask >>= 1
            self.bits_read += 1
            if self.mask == 0:
                self.mask = 0x80
            return 1 if value != 0 else 0

        def input_bits(self, bit_count: int) -> int:
            mask_code: int = 1 << (bit_count - 1)
            return_value: int = 0
            while mask_code != 0:
                if self.mask == 0x80:
                    self._read_rack()
                if (self.rack & self.mask) != 0:
                    return_value |= mask_code
                mask_code >>= 1
                self.mask >>= 1
                self.bits_read += 1
                if self.mask == 0:
                    self.mask = 0x80
            return return_value
