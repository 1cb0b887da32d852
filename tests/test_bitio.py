import io

import pytest

from bitio import CompressorBitio


def make_output():
    stream = io.BytesIO()
    return stream, CompressorBitio.BitFile(stream, False)


def make_input(data: bytes):
    return CompressorBitio.BitFile(io.BytesIO(data), True)


def test_output_bits_are_msb_first_and_padded():
    stream, bit_file = make_output()
    bit_file.output_bits(0b101, 3)
    bit_file.close_bit_file()
    assert stream.getvalue() == bytes([0b10100000])


def test_output_spans_bytes():
    stream, bit_file = make_output()
    bit_file.output_bits(0xFACE8201, 32)
    bit_file.output_bit(1)
    bit_file.close_bit_file()
    assert stream.getvalue() == bytes([0xFA, 0xCE, 0x82, 0x01, 0x80])
    assert bit_file.bits_written == 33


def test_zero_bit_write_is_noop():
    stream, bit_file = make_output()
    bit_file.output_bits(0, 0)
    bit_file.close_bit_file()
    assert stream.getvalue() == b""
    assert bit_file.bits_written == 0


def test_close_is_idempotent():
    stream, bit_file = make_output()
    bit_file.output_bit(1)
    bit_file.close_bit_file()
    bit_file.close_bit_file()
    assert stream.getvalue() == b"\x80"


def test_context_manager_flushes_on_error():
    stream = io.BytesIO()
    with pytest.raises(RuntimeError):
        with CompressorBitio.BitFile(stream, False) as bit_file:
            bit_file.output_bits(0b11, 2)
            raise RuntimeError("boom")
    assert stream.getvalue() == bytes([0b11000000])


def test_input_bits_reads_msb_first():
    bit_file = make_input(bytes([0xFA, 0xCE]))
    assert bit_file.input_bits(4) == 0xF
    assert bit_file.input_bit() == 1
    assert bit_file.input_bits(9) == 0b010110011
    assert bit_file.bits_read == 14


def test_input_raises_eof_at_end():
    bit_file = make_input(b"\x01")
    assert bit_file.input_bits(8) == 1
    with pytest.raises(EOFError):
        bit_file.input_bit()
    with pytest.raises(EOFError):
        make_input(b"").input_bits(8)


def test_reset_rewinds_to_start():
    bit_file = make_input(b"AB")
    assert bit_file.input_bits(3) == 0b010
    bit_file.reset()
    assert bit_file.input_bits(8) == ord("A")
    assert bit_file.input_bits(8) == ord("B")


def test_reset_rejected_on_output():
    _, bit_file = make_output()
    with pytest.raises(ValueError):
        bit_file.reset()


def test_open_by_name_owns_stream(tmp_path):
    path = tmp_path / "bits.bin"
    with CompressorBitio.BitFile.open_output_bit_file(str(path)) as bit_file:
        bit_file.output_bits(0x41, 8)
    assert bit_file.file_stream.closed
    with CompressorBitio.BitFile.open_input_bit_file(str(path)) as bit_file:
        assert bit_file.input_bits(8) == 0x41
