import io
import sys

from bitio import CompressorBitio

BITS_PER_WORD = 8
BITS_PER_INT = 32
SYMBOL_BITS = BITS_PER_WORD + 1
ALPH_SIZE = 1 << BITS_PER_WORD
END_OF_STREAM = ALPH_SIZE
SYMBOL_COUNT = ALPH_SIZE + 1
HUFF_NUMBER = 0xFACE8200
HUFF_TREE = HUFF_NUMBER | 1
NO_CHILD = -1
MAX_TREE_DEPTH = ALPH_SIZE

DEBUG_LOW = 1
DEBUG_HIGH = 4

COMPRESSION_NAME = "static order 0 model with Huffman coding, tree header"
USAGE = "infile outfile [-d] [-D]\n\nSpecifying -d will dump the modeling data\nSpecifying -D will also print every code written\n"


class HuffException(Exception):
    pass


class MalformedHeaderError(HuffException):
    pass


class TruncatedPayloadError(HuffException):
    pass


class Node:
    def __init__(self, symbol: int = 0, count: int = 0, child_0: int = NO_CHILD, child_1: int = NO_CHILD):
        self.symbol = symbol
        self.count = count
        self.child_0 = child_0
        self.child_1 = child_1

    @property
    def is_leaf(self) -> bool:
        return self.child_0 == NO_CHILD and self.child_1 == NO_CHILD


class Code:
    def __init__(self, code: int = 0, code_bits: int = 0):
        self.code = code
        self.code_bits = code_bits

    def __str__(self):
        if self.code_bits == 0:
            return ""
        return f"{self.code:0{self.code_bits}b}"

    def __repr__(self):
        return f"Code('{self}')"


def compress_file(input_bit_file: CompressorBitio.BitFile, output_bit_file: CompressorBitio.BitFile, debug: int = 0):
    counts = count_bytes(input_bit_file)
    nodes, root_node = build_tree(counts)
    codes = convert_tree_to_code(nodes, root_node)

    output_bit_file.output_bits(HUFF_TREE, BITS_PER_INT)
    output_tree(output_bit_file, nodes, root_node)

    if debug >= DEBUG_LOW:
        print_model(nodes, codes)
        print(f"header bits written: {output_bit_file.bits_written}")

    input_bit_file.reset()
    compress_data(input_bit_file, output_bit_file, codes, debug)

    if debug >= DEBUG_LOW:
        print(f"bits read: {input_bit_file.bits_read}  bits written: {output_bit_file.bits_written}")


def expand_file(input_bit_file: CompressorBitio.BitFile, output_bit_file: CompressorBitio.BitFile, debug: int = 0):
    try:
        magic = input_bit_file.input_bits(BITS_PER_INT)
    except EOFError:
        raise MalformedHeaderError("Illegal header: file is shorter than the magic number") from None
    if magic != HUFF_TREE:
        raise MalformedHeaderError(f"Illegal header starts with {magic:#010x}")

    nodes, root_node = input_tree(input_bit_file)

    if debug >= DEBUG_LOW:
        print_model(nodes, convert_tree_to_code(nodes, root_node))

    expand_data(input_bit_file, output_bit_file, nodes, root_node)

    if debug >= DEBUG_LOW:
        print(f"bits read: {input_bit_file.bits_read}  bits written: {output_bit_file.bits_written}")


def compress_bytes(data: bytes, debug: int = 0) -> bytes:
    output = io.BytesIO()
    with CompressorBitio.BitFile(io.BytesIO(data), True) as input_bit_file, \
            CompressorBitio.BitFile(output, False) as output_bit_file:
        compress_file(input_bit_file, output_bit_file, debug)
    return output.getvalue()


def expand_bytes(data: bytes, debug: int = 0) -> bytes:
    output = io.BytesIO()
    with CompressorBitio.BitFile(io.BytesIO(data), True) as input_bit_file, \
            CompressorBitio.BitFile(output, False) as output_bit_file:
        expand_file(input_bit_file, output_bit_file, debug)
    return output.getvalue()


def count_bytes(input_bit_file: CompressorBitio.BitFile) -> list[int]:
    counts = [0] * SYMBOL_COUNT
    while True:
        try:
            c = input_bit_file.input_bits(BITS_PER_WORD)
        except EOFError:
            break
        counts[c] += 1

    # The sentinel never occurs in the data but must always be encodable.
    counts[END_OF_STREAM] = 1
    return counts


def build_tree(counts: list[int]) -> tuple[list[Node], int]:
    """
    Builds the Huffman tree as an arena of nodes and returns (nodes, root).

    Leaves are created in symbol order. Each step merges the two live nodes
    with the smallest counts; ties go to the node that entered the arena
    first, and the smaller of the pair becomes child_0.
    """
    nodes = [Node(symbol, count) for symbol, count in enumerate(counts) if count > 0]
    if not nodes:
        raise ValueError("cannot build a tree from an empty frequency table")
    live = list(range(len(nodes)))

    while len(live) > 1:
        min_1 = min_2 = NO_CHILD
        for i in live:
            if min_1 == NO_CHILD or nodes[i].count < nodes[min_1].count:
                min_2 = min_1
                min_1 = i
            elif min_2 == NO_CHILD or nodes[i].count < nodes[min_2].count:
                min_2 = i

        live.remove(min_1)
        live.remove(min_2)
        nodes.append(Node(0, nodes[min_1].count + nodes[min_2].count, min_1, min_2))
        live.append(len(nodes) - 1)

    return nodes, live[0]


def convert_tree_to_code(nodes: list[Node], root_node: int) -> list[Code]:
    codes = [Code() for _ in range(SYMBOL_COUNT)]
    _assign_codes(nodes, codes, 0, 0, root_node)
    return codes


def _assign_codes(nodes, codes, code_so_far, bits, node):
    if nodes[node].is_leaf:
        codes[nodes[node].symbol] = Code(code_so_far, bits)
        return

    code_so_far <<= 1
    bits += 1
    _assign_codes(nodes, codes, code_so_far, bits, nodes[node].child_0)
    _assign_codes(nodes, codes, code_so_far | 1, bits, nodes[node].child_1)


def output_tree(output_bit_file: CompressorBitio.BitFile, nodes: list[Node], node: int):
    if nodes[node].is_leaf:
        output_bit_file.output_bit(1)
        output_bit_file.output_bits(nodes[node].symbol, SYMBOL_BITS)
        return

    output_bit_file.output_bit(0)
    output_tree(output_bit_file, nodes, nodes[node].child_0)
    output_tree(output_bit_file, nodes, nodes[node].child_1)


def input_tree(input_bit_file: CompressorBitio.BitFile) -> tuple[list[Node], int]:
    nodes: list[Node] = []
    try:
        root_node = _read_node(input_bit_file, nodes, 0)
    except EOFError:
        raise MalformedHeaderError("Illegal header: stream ended inside the tree") from None

    if not any(node.is_leaf and node.symbol == END_OF_STREAM for node in nodes):
        raise MalformedHeaderError("Illegal header: tree has no end of stream symbol")
    return nodes, root_node


def _read_node(input_bit_file, nodes, depth):
    if depth > MAX_TREE_DEPTH:
        raise MalformedHeaderError("Illegal header: tree is too deep")

    if input_bit_file.input_bit() == 0:
        child_0 = _read_node(input_bit_file, nodes, depth + 1)
        child_1 = _read_node(input_bit_file, nodes, depth + 1)
        nodes.append(Node(0, 0, child_0, child_1))
        return len(nodes) - 1

    symbol = input_bit_file.input_bits(SYMBOL_BITS)
    if symbol > END_OF_STREAM:
        raise MalformedHeaderError(f"Illegal header: symbol {symbol} out of range")
    if depth == 0 and symbol != END_OF_STREAM:
        raise MalformedHeaderError(f"Illegal header: single leaf tree holds symbol {symbol}")
    nodes.append(Node(symbol))
    return len(nodes) - 1


def compress_data(input_bit_file: CompressorBitio.BitFile, output_bit_file: CompressorBitio.BitFile,
                  codes: list[Code], debug: int = 0):
    while True:
        try:
            c = input_bit_file.input_bits(BITS_PER_WORD)
        except EOFError:
            break
        if debug >= DEBUG_HIGH:
            print(f"Huffman encoding of {c} is {codes[c]}")
        output_bit_file.output_bits(codes[c].code, codes[c].code_bits)

    # Zero bits when the tree is a lone sentinel leaf.
    output_bit_file.output_bits(codes[END_OF_STREAM].code, codes[END_OF_STREAM].code_bits)


def expand_data(input_bit_file: CompressorBitio.BitFile, output_bit_file: CompressorBitio.BitFile,
                nodes: list[Node], root_node: int):
    if nodes[root_node].is_leaf:
        return

    node = root_node
    while True:
        try:
            bit = input_bit_file.input_bit()
        except EOFError:
            raise TruncatedPayloadError("Compressed data ended before the end of stream code") from None

        node = nodes[node].child_1 if bit else nodes[node].child_0

        if nodes[node].is_leaf:
            if nodes[node].symbol == END_OF_STREAM:
                break
            output_bit_file.output_bits(nodes[node].symbol, BITS_PER_WORD)
            node = root_node


def print_char(c):
    if 0x20 <= c < 127:
        print(f"'{chr(c)}'", end="")
    elif c == END_OF_STREAM:
        print("EOS", end="")
    else:
        print(f"{c:3d}", end="")


def print_model(nodes: list[Node], codes: list[Code]):
    for i, node in enumerate(nodes):
        print(f"node={i:3d}", end="")
        print(f"  count={node.count:3d}", end="")
        if node.is_leaf:
            print("  symbol=", end="")
            print_char(node.symbol)
            print(f"  Huffman code={codes[node.symbol]}", end="")
        else:
            print(f"  child_0={node.child_0:3d}  child_1={node.child_1:3d}", end="")
        print()
    sys.stdout.flush()
