import struct

import numpy as np
from PIL import Image

from .errors import TruncatedInput
from .qoi import QOI_SRGB, QOIDesc

RAW_EXTENSIONS = ("dng", "cr2", "nef", "arw", "raw")

# Benchmark pixel dump: width(u32) height(u32) channels(u8) colorspace(u8), little-endian
DUMP_HEADER_FORMAT = "<IIBB"
DUMP_HEADER_SIZE = struct.calcsize(DUMP_HEADER_FORMAT)


def load_image(filepath: str) -> tuple[np.ndarray, QOIDesc]:
    """Load an image and return pixel data as a (height, width, channels) array + QOIDesc."""

    ext = filepath.lower().split(".")[-1]

    if ext in RAW_EXTENSIONS:
        # RAW formats - requires rawpy
        import rawpy

        with rawpy.imread(filepath) as raw:
            rgb = raw.postprocess()
        img = Image.fromarray(rgb)
    else:
        # Standard formats (PNG, JPEG, etc.)
        img = Image.open(filepath)

    # Convert to RGB or RGBA
    if img.mode == "RGBA":
        channels = 4
    else:
        img = img.convert("RGB")
        channels = 3

    width, height = img.size
    return np.array(img), QOIDesc(width, height, channels, QOI_SRGB)


def load_pixel_dump(filepath: str) -> tuple[bytes, QOIDesc]:
    """Read a raw pixel dump written by write_pixel_dump."""
    with open(filepath, "rb") as f:
        header = f.read(DUMP_HEADER_SIZE)
        if len(header) != DUMP_HEADER_SIZE:
            raise TruncatedInput(f"{filepath}: pixel dump header too short")

        desc = QOIDesc(*struct.unpack(DUMP_HEADER_FORMAT, header))
        desc.validate(filepath)

        pixel_length = desc.total_pixels * desc.channels
        pixels = f.read(pixel_length)

    if len(pixels) != pixel_length:
        raise TruncatedInput(
            f"{filepath}: expected {pixel_length} pixel bytes, got {len(pixels)}"
        )
    return pixels, desc


def write_pixel_dump(filepath: str, pixels, desc: QOIDesc) -> None:
    with open(filepath, "wb") as f:
        f.write(
            struct.pack(
                DUMP_HEADER_FORMAT, desc.width, desc.height, desc.channels, desc.colorspace
            )
        )
        f.write(bytes(pixels))


def to_array(pixels: bytes, desc: QOIDesc, channels: int = None) -> np.ndarray:
    """View decoded pixel bytes as a (height, width, channels) uint8 array."""
    if channels is None:
        channels = len(pixels) // desc.total_pixels
    return np.frombuffer(pixels, dtype=np.uint8).reshape(
        desc.height, desc.width, channels
    )
