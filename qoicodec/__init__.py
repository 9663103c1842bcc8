from .decoder import QOIDecoder, decode
from .encoder import QOIEncoder, encode
from .errors import (
    BadMagic,
    DimensionOverflow,
    InvalidChannels,
    InvalidDescriptor,
    InvalidPixelData,
    QOIError,
    TruncatedInput,
)
from .qoi import QOI_LINEAR, QOI_SRGB, QOIDesc, max_encoded_size
from .utils import load_image, load_pixel_dump, write_pixel_dump

__all__ = [
    "QOIEncoder",
    "QOIDecoder",
    "QOIDesc",
    "encode",
    "decode",
    "max_encoded_size",
    "QOI_SRGB",
    "QOI_LINEAR",
    "QOIError",
    "InvalidDescriptor",
    "DimensionOverflow",
    "InvalidPixelData",
    "InvalidChannels",
    "BadMagic",
    "TruncatedInput",
    "load_image",
    "load_pixel_dump",
    "write_pixel_dump",
]
