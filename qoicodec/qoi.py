import numbers
import struct
from dataclasses import asdict, dataclass

from .errors import DimensionOverflow, InvalidDescriptor

# QOI Constants
QOI_SRGB = 0
QOI_LINEAR = 1

QOI_OP_INDEX = 0x00  # 00xxxxxx
QOI_OP_DIFF = 0x40  # 01xxxxxx
QOI_OP_LUMA = 0x80  # 10xxxxxx
QOI_OP_RUN = 0xC0  # 11xxxxxx
QOI_OP_RGB = 0xFE  # 11111110
QOI_OP_RGBA = 0xFF  # 11111111

QOI_MASK_2 = 0xC0  # 11000000

QOI_MAGIC = b"qoif"
QOI_HEADER_FORMAT = ">4sIIBB"
QOI_HEADER_SIZE = 14
QOI_PADDING = b"\x00\x00\x00\x00\x00\x00\x00\x01"
QOI_PIXELS_MAX = 400000000  # Safety limit (400MP)

QOI_RUN_MAX = 62
QOI_INDEX_SIZE = 64


def color_hash(r: int, g: int, b: int, a: int) -> int:
    """Calculates the index position for the color array."""
    return (r * 3 + g * 5 + b * 7 + a * 11) % 64


@dataclass(frozen=True)
class QOIDesc:
    """
    Image description carried in the QOI header.

    :param width: image width in pixels
    :param height: image height in pixels
    :param channels: 3 (RGB) or 4 (RGBA)
    :param colorspace: 0 (sRGB) or 1 (Linear)
    """

    width: int
    height: int
    channels: int
    colorspace: int = QOI_SRGB

    @classmethod
    def from_dict(cls, description: dict) -> "QOIDesc":
        return cls(
            width=description.get("width"),
            height=description.get("height"),
            channels=description.get("channels"),
            colorspace=description.get("colorspace", QOI_SRGB),
        )

    def as_dict(self) -> dict:
        return asdict(self)

    @property
    def total_pixels(self) -> int:
        return self.width * self.height

    def validate(self, where: str = "QOI") -> None:
        for name in ("width", "height", "channels", "colorspace"):
            if not isinstance(getattr(self, name), numbers.Integral):
                raise InvalidDescriptor(f"{where}: Invalid description.{name}")

        if not (0 < self.width < 4294967296):
            raise InvalidDescriptor(f"{where}: Invalid description.width")

        if not (0 < self.height < 4294967296):
            raise InvalidDescriptor(f"{where}: Invalid description.height")

        if self.channels not in (3, 4):
            raise InvalidDescriptor(
                f"{where}: Invalid description.channels, must be 3 or 4"
            )

        if self.colorspace not in (QOI_SRGB, QOI_LINEAR):
            raise InvalidDescriptor(
                f"{where}: Invalid description.colorspace, must be 0 or 1"
            )

        # width * height must stay below QOI_PIXELS_MAX
        if self.height >= QOI_PIXELS_MAX // self.width:
            raise DimensionOverflow(
                f"{where}: Image of {self.width}x{self.height} exceeds "
                f"{QOI_PIXELS_MAX} pixels"
            )


def max_encoded_size(desc: QOIDesc) -> int:
    """Upper bound of an encoded stream: every pixel as an RGB/RGBA chunk."""
    return (
        desc.width * desc.height * (desc.channels + 1)
        + QOI_HEADER_SIZE
        + len(QOI_PADDING)
    )


def write_header(desc: QOIDesc) -> bytes:
    # 0-3: magic "qoif"
    # 4-7: width (Big Endian), 8-11: height (Big Endian)
    # 12: channels, 13: colorspace
    return struct.pack(
        QOI_HEADER_FORMAT, QOI_MAGIC, desc.width, desc.height, desc.channels, desc.colorspace
    )


def read_header(data) -> tuple[bytes, QOIDesc]:
    """
    Unpack the 14 header bytes. The descriptor is returned unvalidated.

    :param data: at least QOI_HEADER_SIZE bytes
    :return: (magic, QOIDesc)
    """
    magic, width, height, channels, colorspace = struct.unpack(
        QOI_HEADER_FORMAT, bytes(data[:QOI_HEADER_SIZE])
    )
    return magic, QOIDesc(width, height, channels, colorspace)
