'''
Names, exceptions and small value types shared by the schematic modules.
'''

from collections import namedtuple
from logging import getLogger
import os
import tempfile

log = getLogger(__name__)
warn, error, info, debug = log.warning, log.error, log.info, log.debug

# schematic root tag entries
Width = 'Width'
Height = 'Height'
Length = 'Length'
Materials = 'Materials'
Blocks = 'Blocks'
Data = 'Data'
Entities = 'Entities'
TileEntities = 'TileEntities'


class MalformedTag(ValueError):
    """The tag tree is structurally invalid: an unknown type marker, a length
    running past the end of the data, or an unterminated compound."""
    pass


class MissingField(KeyError):
    """A compound has no tag with the expected name, or the tag has the wrong type."""
    pass


class CorruptStream(IOError):
    pass


class DecodeError(ValueError):
    """Raised by schematic decoding. The original failure is chained as __cause__."""
    pass


class IndexOutOfBounds(IndexError):
    pass


class BufferSizeError(ValueError):
    """The Blocks or Data buffer does not hold exactly Width*Height*Length bytes."""
    pass


class BlockDescriptor(namedtuple('BlockDescriptor', 'ID blockData x y z')):
    """An immutable block value: numeric id (0-255), data value (0-15) and
    integer position. Descriptors handed out by a schematic are copies and
    never refer back into its buffers."""
    __slots__ = ()

    def __new__(cls, ID, blockData=0, x=0, y=0, z=0):
        return super(BlockDescriptor, cls).__new__(cls, ID, blockData, x, y, z)

    @property
    def position(self):
        return self.x, self.y, self.z

    def moved(self, dx, dy, dz):
        return self._replace(x=self.x + dx, y=self.y + dy, z=self.z + dz)

    def __str__(self):
        return "<BlockDescriptor {0}:{1} at ({2}, {3}, {4})>".format(self.ID, self.blockData, self.x, self.y, self.z)


class LocalFilesystem(object):
    """Reads and writes whole files. Writes go to a temporary file beside the
    target which then replaces it, so a failed write leaves the old file intact."""

    def readAll(self, filename):
        with open(filename, 'rb') as f:
            return f.read()

    def writeAll(self, filename, data):
        dirname = os.path.dirname(os.path.abspath(filename))
        fd, tmpname = tempfile.mkstemp(prefix=os.path.basename(filename), suffix=".tmp", dir=dirname)
        try:
            with os.fdopen(fd, 'wb') as f:
                f.write(data)
            os.replace(tmpname, filename)
        except BaseException:
            os.unlink(tmpname)
            raise
        debug(u"Wrote {0} bytes to {1}".format(len(data), filename))


filesystem = LocalFilesystem()
