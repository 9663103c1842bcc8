import logging

from .errors import BadMagic, InvalidChannels, TruncatedInput
from .qoi import (
    QOI_HEADER_SIZE,
    QOI_INDEX_SIZE,
    QOI_MAGIC,
    QOI_MASK_2,
    QOI_OP_DIFF,
    QOI_OP_INDEX,
    QOI_OP_LUMA,
    QOI_OP_RGB,
    QOI_OP_RGBA,
    QOI_OP_RUN,
    QOI_PADDING,
    QOIDesc,
    color_hash,
    read_header,
)

logger = logging.getLogger(__name__)


class QOIDecoder:
    """
    A class to decode QOI (Quite OK Image) streams into raw pixel data.
    """

    @staticmethod
    def decode(
        file_data,
        byte_offset: int = 0,
        byte_length: int = None,
        output_channels: int = 0,
    ) -> tuple[bytes, QOIDesc]:
        """
        Decode a QOI stream given as a bytes-like object.

        :param file_data: Bytes containing the QOI stream.
        :param byte_offset: Offset to the start of the QOI stream in file_data.
        :param byte_length: Length of the QOI stream in bytes. Defaults to the rest of file_data.
        :param output_channels: Number of channels in the decoded pixels (3 or 4).
                                0 or None uses the channels declared in the header.
        :return: (pixels, desc) where desc is the description from the header.
        """
        if file_data is None:
            raise TruncatedInput("QOI.decode: No data given")

        if output_channels is None:
            output_channels = 0

        if output_channels not in (0, 3, 4):
            raise InvalidChannels(
                "QOI.decode: The number of channels for the output is invalid"
            )

        # --- Handle Slicing ---
        if byte_length is None:
            byte_length = len(file_data) - byte_offset

        data = memoryview(file_data).cast("B")[byte_offset : byte_offset + byte_length]
        size = len(data)

        if size < QOI_HEADER_SIZE + len(QOI_PADDING):
            raise TruncatedInput(
                f"QOI.decode: {size} bytes is too short for a QOI stream"
            )

        # --- Header Parsing ---
        magic, desc = read_header(data)

        if magic != QOI_MAGIC:
            raise BadMagic("QOI.decode: The signature of the QOI file is invalid")

        desc.validate("QOI.decode")

        if output_channels == 0:
            output_channels = desc.channels

        # --- Initialization ---
        pixel_length = desc.total_pixels * output_channels
        result = bytearray(pixel_length)

        index = [(0, 0, 0, 0)] * QOI_INDEX_SIZE

        r, g, b, a = 0, 0, 0, 255

        read_pos = QOI_HEADER_SIZE
        run = 0

        # Chunks never extend into the end marker
        chunks_length = size - len(QOI_PADDING)

        # --- Decoding Loop ---
        for write_pos in range(0, pixel_length, output_channels):
            if run > 0:
                run -= 1

            elif read_pos < chunks_length:
                b1 = data[read_pos]
                read_pos += 1

                if b1 == QOI_OP_RGB:
                    r = data[read_pos]
                    g = data[read_pos + 1]
                    b = data[read_pos + 2]
                    read_pos += 3

                elif b1 == QOI_OP_RGBA:
                    r = data[read_pos]
                    g = data[read_pos + 1]
                    b = data[read_pos + 2]
                    a = data[read_pos + 3]
                    read_pos += 4

                elif (b1 & QOI_MASK_2) == QOI_OP_INDEX:
                    r, g, b, a = index[b1 & 0x3F]

                elif (b1 & QOI_MASK_2) == QOI_OP_DIFF:
                    r = (r + ((b1 >> 4) & 0x03) - 2) & 0xFF
                    g = (g + ((b1 >> 2) & 0x03) - 2) & 0xFF
                    b = (b + (b1 & 0x03) - 2) & 0xFF

                elif (b1 & QOI_MASK_2) == QOI_OP_LUMA:
                    b2 = data[read_pos]
                    read_pos += 1

                    vg = (b1 & 0x3F) - 32
                    r = (r + vg - 8 + ((b2 >> 4) & 0x0F)) & 0xFF
                    g = (g + vg) & 0xFF
                    b = (b + vg - 8 + (b2 & 0x0F)) & 0xFF

                elif (b1 & QOI_MASK_2) == QOI_OP_RUN:
                    # Excludes the current pixel, which repeats the previous one
                    run = b1 & 0x3F

                # RGB, RGBA, DIFF and LUMA chunks refresh the cache
                if b1 >= QOI_OP_RGB or QOI_OP_DIFF <= b1 < QOI_OP_RUN:
                    index[color_hash(r, g, b, a)] = (r, g, b, a)

            # --- Write Pixel ---
            result[write_pos] = r
            result[write_pos + 1] = g
            result[write_pos + 2] = b
            if output_channels == 4:
                result[write_pos + 3] = a

        logger.debug(
            "Decoded %dx%d (%d channels) from %d bytes into %d channels",
            desc.width,
            desc.height,
            desc.channels,
            size,
            output_channels,
        )
        return bytes(result), desc


def decode(file_data, byte_offset: int = 0, byte_length: int = None, output_channels: int = 0):
    return QOIDecoder.decode(file_data, byte_offset, byte_length, output_channels)
