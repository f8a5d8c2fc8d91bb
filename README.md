# qrforge

qrforge creates QR Code symbols (Model 2, versions 1 to 40) from text or
binary data. It supports all four error correction levels, numeric,
alphanumeric, byte and ECI segments, automatic or fixed mask selection,
and picks the smallest version that fits the data. It uses only the
standard library.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Command line

Installing the package provides the `qrforge` command. Run without a
subcommand it prints its help:

```
qrforge --help
```

### `qrforge generate [TEXT] [--save PATH]`

Encodes `TEXT` (or, if omitted, text typed at the `Enter text:` prompt)
and prints the symbol in the terminal with block characters. The text may
be at most 127 bytes in UTF-8. With `--save PATH` the text is also written
to `PATH`.

### `qrforge saved [PATH] [--folder FOLDER]`

Without `PATH`, lists the names of the `.txt` files in `FOLDER`. With
`PATH`, reads the text stored in that file and prints its QR Code. A
relative `PATH` that does not exist is looked up inside `FOLDER`. The
folder defaults to `~/apps_data/qrcode_generator`.

### `qrforge readme`

Prints a short description of the program.

The command exits with status 1 when a file cannot be read or written or
the text cannot be encoded, and with 0 otherwise.

## Library use

### High level

```python
from qrforge.ecc import Ecc
from qrforge.qrcode import Mask, encode_text, encode_binary

qr = encode_text(
    "HELLO WORLD",
    ecl=Ecc.LOW,
    min_version=1,
    max_version=40,
    mask=Mask.AUTO,
    boost_ecl=True,
)
print(qr.version, qr.ecl, qr.mask, qr.size)
print(qr.get_module(0, 0))   # True: the top-left finder pattern is dark

raw = encode_binary(
    b"\x00\x01\x02",
    ecl=Ecc.MEDIUM,
    min_version=1,
    max_version=40,
    mask=Mask.AUTO,
    boost_ecl=True,
)
```

`encode_text` chooses numeric, alphanumeric or UTF-8 byte mode for the
whole text; `encode_binary` always uses byte mode. With `boost_ecl` set,
the error correction level is raised as far as it goes without needing a
larger version. If the data does not fit in any version of the given
range, `DataTooLongError` (a `ValueError`) is raised.

A `QrCode` is immutable. `modules` holds the rows of the grid,
`get_module(x, y)` returns `True` for a dark module and `False` for a
light one, and coordinates outside the symbol are light.
`buffer_len_for_version(version)` gives the number of bytes needed to
store a symbol of up to that version packed one bit per module.

### Segments

For mixed content, build segments yourself and encode them together:

```python
from qrforge.ecc import Ecc
from qrforge.qrcode import encode_segments
from qrforge.segment import make_alphanumeric, make_numeric, make_bytes

segs = [
    make_alphanumeric("ORDER "),
    make_numeric("0123456789"),
    make_bytes("/ü".encode("utf-8")),
]
qr = encode_segments(segs, Ecc.LOW)
```

`is_numeric` and `is_alphanumeric` tell whether a string may go into the
matching segment type, and `make_eci` builds an Extended Channel
Interpretation designator. `encode_segments_advanced` accepts the same
version range, mask and `boost_ecl` options as `encode_text`.
`calc_segment_bit_length`, `calc_segment_buffer_size` and
`get_total_bits` return `None` when a length would overflow.

### Showing a symbol

```python
from qrforge.app import generate_qrcode, render_text, qrcode_boxes

qr = generate_qrcode("Hello, world!")
print(render_text(qr))

for box in qrcode_boxes(qr, 2):
    ...  # box.x, box.y, box.width, box.height on a 128x64 canvas
```

`generate_qrcode` encodes with low error correction (boosted when
possible), any version and an automatically chosen mask. `render_text`
draws the symbol with two block characters per module and a light border
of two modules. `qrcode_boxes` yields one square per dark module, scaled
and centred on a 128 by 64 pixel display.

`write_text_to_file` stores text as UTF-8, replacing the file's content;
`read_text_from_file` returns the text up to the first NUL byte.

## What it does not do

- Symbols are shown only as terminal text or as a list of boxes; there is
  no image file output (PNG, SVG or the like) and no window to draw in.
- There is no builder for kanji segments; `Mode.KANJI` exists, but such a
  segment must be put together by hand.
- It only generates symbols; it does not read or decode them.

## Modules

- `qrforge.segment` – segment modes, bit buffers and segment builders
- `qrforge.ecc` – error correction levels, capacity tables, Reed–Solomon
- `qrforge.matrix` – function patterns, codeword placement, masks, penalty
- `qrforge.qrcode` – the `QrCode` type and the encoding functions
- `qrforge.app` – file storage, rendering and the `qrforge` command