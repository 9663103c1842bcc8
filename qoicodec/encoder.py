import logging
from collections.abc import Mapping

from .errors import InvalidDescriptor, InvalidPixelData
from .qoi import (
    QOI_INDEX_SIZE,
    QOI_OP_DIFF,
    QOI_OP_INDEX,
    QOI_OP_LUMA,
    QOI_OP_RGB,
    QOI_OP_RGBA,
    QOI_OP_RUN,
    QOI_PADDING,
    QOI_RUN_MAX,
    QOIDesc,
    color_hash,
    write_header,
)

logger = logging.getLogger(__name__)


def _signed_delta(x: int, y: int) -> int:
    # Byte-wrapped difference in -128..127
    d = (x - y) & 0xFF
    return d - 256 if d > 127 else d


class QOIEncoder:
    @staticmethod
    def encode(color_data, description) -> bytes:
        """
        Encode raw pixels into a QOI stream.

        :param color_data: Bytes-like object (bytes, bytearray, memoryview, list of ints) containing pixel data.
        :param description: QOIDesc, or a dictionary containing 'width', 'height', 'channels', 'colorspace'.
        :return: bytes object containing the QOI stream. Its length is the encoded length.
        """
        if isinstance(description, QOIDesc):
            desc = description
        elif isinstance(description, Mapping):
            desc = QOIDesc.from_dict(description)
        else:
            raise InvalidDescriptor(
                f"QOI.encode: Invalid description of type {type(description).__name__}"
            )

        # --- Validation ---
        if color_data is None:
            raise InvalidPixelData("QOI.encode: No pixel data given")

        desc.validate("QOI.encode")

        if isinstance(color_data, memoryview):
            color_data = color_data.cast("B")
        elif not isinstance(color_data, (bytes, bytearray)):
            # Lists of ints must hold byte values
            if isinstance(color_data, int):
                raise InvalidPixelData("QOI.encode: colorData must be a sequence of bytes")
            try:
                color_data = bytes(color_data)
            except (TypeError, ValueError) as e:
                raise InvalidPixelData(f"QOI.encode: Invalid colorData, {e}") from e

        channels = desc.channels
        pixel_length = desc.total_pixels * channels
        if len(color_data) != pixel_length:
            raise InvalidPixelData(
                f"QOI.encode: The length of colorData is incorrect, "
                f"expected {pixel_length} bytes, got {len(color_data)}"
            )

        # --- Initialization ---
        result = bytearray(write_header(desc))

        prev_r, prev_g, prev_b, prev_a = 0, 0, 0, 255
        run = 0

        # Index array: 64 pixels, initialized to zero.
        index = [(0, 0, 0, 0)] * QOI_INDEX_SIZE

        last_pos = pixel_length - channels

        # --- Pixel Loop ---
        for i in range(0, pixel_length, channels):
            r = color_data[i]
            g = color_data[i + 1]
            b = color_data[i + 2]
            a = color_data[i + 3] if channels == 4 else 255

            if r == prev_r and g == prev_g and b == prev_b and a == prev_a:
                run += 1
                if run == QOI_RUN_MAX or i == last_pos:
                    result.append(QOI_OP_RUN | (run - 1))
                    run = 0
                continue

            # A changed pixel ends the pending run
            if run > 0:
                result.append(QOI_OP_RUN | (run - 1))
                run = 0

            px = (r, g, b, a)
            index_pos = color_hash(r, g, b, a)

            if index[index_pos] == px:
                result.append(QOI_OP_INDEX | index_pos)
            else:
                index[index_pos] = px

                if a == prev_a:
                    vr = _signed_delta(r, prev_r)
                    vg = _signed_delta(g, prev_g)
                    vb = _signed_delta(b, prev_b)

                    vg_r = vr - vg
                    vg_b = vb - vg

                    if -2 <= vr <= 1 and -2 <= vg <= 1 and -2 <= vb <= 1:
                        result.append(
                            QOI_OP_DIFF | ((vr + 2) << 4) | ((vg + 2) << 2) | (vb + 2)
                        )
                    elif -32 <= vg <= 31 and -8 <= vg_r <= 7 and -8 <= vg_b <= 7:
                        result.append(QOI_OP_LUMA | (vg + 32))
                        result.append(((vg_r + 8) << 4) | (vg_b + 8))
                    else:
                        result.append(QOI_OP_RGB)
                        result.extend((r, g, b))
                else:
                    result.append(QOI_OP_RGBA)
                    result.extend((r, g, b, a))

            prev_r, prev_g, prev_b, prev_a = r, g, b, a

        # --- End Marker ---
        result.extend(QOI_PADDING)

        logger.debug(
            "Encoded %dx%d (%d channels) into %d bytes",
            desc.width,
            desc.height,
            channels,
            len(result),
        )
        return bytes(result)


def encode(color_data, description) -> bytes:
    return QOIEncoder.encode(color_data, description)
