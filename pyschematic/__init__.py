from .box import BoundingBox, blockIndex, blockPosition
from .materials import alphaMaterials, classicMaterials, namedMaterials, pocketMaterials, unknownMaterials
from .schematic import fromFile, fromString, LegacySchematic, PocketSchematic, Schematic
from .schematicbase import (BlockDescriptor, BufferSizeError, CorruptStream, DecodeError, IndexOutOfBounds,
                            MalformedTag, MissingField)
