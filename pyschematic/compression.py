'''
The compression envelope around serialized tag trees.

Schematics are written as gzip streams. Some tools write a bare zlib stream
instead, so inflate() accepts either and tells them apart by the header.
'''

from contextlib import closing
import gzip
from io import BytesIO
from logging import getLogger
import zlib

from .schematicbase import CorruptStream

log = getLogger(__name__)
debug = log.debug

GZIP_MAGIC = b"\x1f\x8b"

# fast; level 9 saves little on block arrays
DEFAULT_COMPRESSION_LEVEL = 1

__all__ = ['inflate', 'deflate', 'isGzipped', 'DEFAULT_COMPRESSION_LEVEL']


def isGzipped(data):
    return data[:2] == GZIP_MAGIC


def inflate(data):
    """Decompress a gzip or zlib stream. Raises CorruptStream if the header is
    invalid or the stream is truncated."""
    data = bytes(data)
    if isGzipped(data):
        try:
            with closing(gzip.GzipFile(fileobj=BytesIO(data), mode="rb")) as gzipper:
                return gzipper.read()
        except (OSError, EOFError, zlib.error) as e:
            raise CorruptStream("Invalid gzip stream ({0})".format(e)) from e

    debug(u"No gzip header, reading {0} bytes as a zlib stream".format(len(data)))
    try:
        return zlib.decompress(data)
    except zlib.error as e:
        raise CorruptStream("Not a gzip or zlib stream ({0})".format(e)) from e


def deflate(data, compresslevel=DEFAULT_COMPRESSION_LEVEL):
    """Compress data into a gzip stream. The header timestamp is zeroed so
    the same input always gives the same output."""
    sio = BytesIO()
    with closing(gzip.GzipFile(fileobj=sio, mode="wb", compresslevel=compresslevel, mtime=0)) as outputGz:
        outputGz.write(bytes(data))
    return sio.getvalue()
