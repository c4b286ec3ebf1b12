import os
import random
import struct
import unittest

import numpy

from pyschematic import nbt, schematic
from pyschematic.box import BoundingBox, blockIndex
from pyschematic.compression import deflate, inflate
from pyschematic.schematic import fromFile, fromString, GrowableBuffer, LegacySchematic, PocketSchematic
from pyschematic.schematicbase import (BlockDescriptor, BufferSizeError, CorruptStream, DecodeError,
                                       IndexOutOfBounds, MalformedTag, MissingField)
from templevel import mktemp, schematicData, schematicTag, TempSchematic

__author__ = 'Rio'


def randomBlocks(box, seed=0):
    rand = random.Random(seed)
    return [BlockDescriptor(rand.randrange(256), rand.randrange(16), x, y, z) for x, y, z in box.positions]


class TestSchematics(unittest.TestCase):
    def assertSameContents(self, a, b):
        self.assertEqual(a.size, b.size)
        self.assertEqual(a.Materials, b.Materials)
        self.assertTrue(numpy.array_equal(a.Blocks, b.Blocks))
        self.assertTrue(numpy.array_equal(a.Data, b.Data))

    def testCreate(self):
        sch = PocketSchematic(shape=(4, 3, 2))
        self.assertEqual(sch.size, (4, 3, 2))
        self.assertEqual(sch.Materials, "Pocket")
        self.assertEqual(sch.Blocks.size, 24)
        self.assertEqual(sch.bounds, BoundingBox((0, 0, 0), (4, 3, 2)))

        self.assertEqual(LegacySchematic().Materials, "Alpha")
        self.assertEqual(LegacySchematic(mats="Classic").Materials, "Classic")

        self.assertRaises(ValueError, PocketSchematic, (1, 40000, 1))

    def testPocketRoundTrip(self):
        box = BoundingBox.fromCorners((10, 64, -5), (12, 65, -3))
        blocks = randomBlocks(box)

        sch = PocketSchematic()
        sch.setBlocks(box, blocks)
        self.assertEqual(sch.size, (3, 2, 3))

        decoded = PocketSchematic().decode(sch.encode())
        self.assertSameContents(decoded, sch)

        "Pocket blocks are not remapped, and come back relative to the box origin"
        self.assertEqual(set(decoded.iterBlocks()), set(b.moved(-10, -64, 5) for b in blocks))

        "encode() can be called again"
        self.assertEqual(sch.encode(), sch.encode())

    def testLegacyRoundTrip(self):
        blocks = randomBlocks(BoundingBox((-4, 0, 2), (3, 4, 2)), seed=1)

        sch = LegacySchematic()
        sch.setBlockArray(blocks)
        self.assertEqual(sch.size, (3, 4, 2))

        decoded = fromString(sch.encode())
        self.assertIsInstance(decoded, LegacySchematic)
        self.assertSameContents(decoded, sch)
        self.assertEqual(decoded.blockList, [b.moved(4, 0, -2) for b in sorted(blocks, key=lambda b: b.position)])

        for b in blocks:
            self.assertEqual(decoded.blockAt(b.x + 4, b.y, b.z - 2), b.ID)
            self.assertEqual(decoded.blockDataAt(b.x + 4, b.y, b.z - 2), b.blockData)

    def testEmpty(self):
        for cls in (PocketSchematic, LegacySchematic):
            decoded = cls().decode(cls().encode())
            self.assertEqual(decoded.size, (0, 0, 0))
            self.assertEqual(decoded.Blocks.size, 0)
            self.assertEqual(list(decoded.iterBlocks()), [])

            sch = cls()
            sch.setBlockArray([])
            self.assertEqual(sch.size, (0, 0, 0))

    def testWriteOrder(self):
        "Blocks given in any order fill the same buffers"
        box = BoundingBox((0, 0, 0), (2, 2, 2))
        blocks = [BlockDescriptor(i + 1, i % 16, x, y, z) for i, (x, y, z) in enumerate(box.positions)]
        linear = sorted(blocks, key=lambda b: blockIndex(b.x, b.y, b.z, 2, 2))
        shuffled = list(blocks)
        random.Random(5).shuffle(shuffled)

        a = PocketSchematic()
        a.setBlocks(box, linear)
        b = PocketSchematic()
        b.setBlocks(box, shuffled)
        self.assertSameContents(a, b)
        self.assertEqual(a.encode(), b.encode())

        "Cells no block is given for are air"
        c = PocketSchematic()
        c.setBlocks(box, [BlockDescriptor(4, 0, 1, 1, 1)])
        self.assertEqual(list(c.Blocks), [0, 0, 0, 0, 0, 0, 0, 4])

        self.assertRaises(IndexOutOfBounds, c.setBlocks, box, [BlockDescriptor(4, 0, 2, 0, 0)])
        "a failed setBlocks leaves the schematic as it was"
        self.assertEqual(list(c.Blocks), [0, 0, 0, 0, 0, 0, 0, 4])

    def testIterationOrder(self):
        pocket = [b.position for b in PocketSchematic((2, 2, 2)).iterBlocks()]
        legacy = [b.position for b in LegacySchematic((2, 2, 2)).iterBlocks()]

        "Pocket walks x, then z, then y; legacy walks x, then y, then z"
        self.assertEqual(pocket, [(0, 0, 0), (0, 1, 0), (0, 0, 1), (0, 1, 1),
                                  (1, 0, 0), (1, 1, 0), (1, 0, 1), (1, 1, 1)])
        self.assertEqual(legacy, [(0, 0, 0), (0, 0, 1), (0, 1, 0), (0, 1, 1),
                                  (1, 0, 0), (1, 0, 1), (1, 1, 0), (1, 1, 1)])

        "Each call starts over"
        sch = PocketSchematic((3, 1, 2))
        self.assertEqual(list(sch.iterBlocks()), list(sch.iterBlocks()))

    def testLegacyRemap(self):
        "A one-block Alpha schematic holding stained glass reads back as id 241"
        data = schematicData(1, 1, 1, "Alpha", [95], [0])
        for cls in (LegacySchematic, PocketSchematic):
            sch = cls().decode(data)
            self.assertEqual(list(sch.iterBlocks()), [BlockDescriptor(241, 0, 0, 0, 0)])
            "The stored arrays keep the original id"
            self.assertEqual(sch.blockAt(0, 0, 0), 95)

        data = schematicData(2, 1, 1, "Alpha", [188, 191], [7, 7])
        sch = fromString(data)
        self.assertEqual([(b.ID, b.blockData) for b in sch.iterBlocks()], [(85, 1), (85, 5)])

        "Pocket schematics already use current ids"
        sch = PocketSchematic().decode(schematicData(1, 1, 1, "Pocket", [95], [3]))
        self.assertEqual(list(sch.iterBlocks()), [BlockDescriptor(95, 3, 0, 0, 0)])

    def testResolvedBlocks(self):
        sch = fromString(schematicData(1, 2, 1, "Alpha", [188, 1], [0, 0]))
        resolved = [(block.name, pos) for block, pos in sch.iterResolvedBlocks()]
        self.assertEqual(resolved, [("Spruce Fence", (0, 0, 0)), ("Stone", (0, 1, 0))])

    def testShortBuffers(self):
        "Blocks missing from short arrays read as air"
        sch = PocketSchematic().decode(schematicData(2, 1, 1, "Pocket", [7], [3]))
        self.assertEqual(list(sch.iterBlocks()), [BlockDescriptor(7, 3, 0, 0, 0), BlockDescriptor(0, 0, 1, 0, 0)])
        self.assertEqual(sch.blockAt(1, 0, 0), 0)
        self.assertEqual(sch.blockAt(5, 0, 0), 0)

        "but the schematic won't be written that way"
        self.assertRaises(BufferSizeError, sch.encode)

        sch = PocketSchematic((2, 2, 2))
        sch.Data = numpy.zeros(7, numpy.uint8)
        self.assertRaises(BufferSizeError, sch.encode)

    def testDecodeErrors(self):
        sch = PocketSchematic((2, 2, 2))

        def assertDecodeError(data, cause):
            with self.assertRaises(DecodeError) as cm:
                sch.decode(data)
            self.assertIsInstance(cm.exception.__cause__, cause)

        with self.assertLogs(schematic.log, "ERROR"):
            assertDecodeError(b"garbage", CorruptStream)
        assertDecodeError(deflate(b"\x0a\x00"), MalformedTag)
        assertDecodeError(deflate(nbt.TAG_Int(3).save()), MalformedTag)

        root_tag = schematicTag(1, 1, 1, "Pocket", [1], [0])
        del root_tag["Width"]
        assertDecodeError(deflate(root_tag.save()), MissingField)

        root_tag = schematicTag(1, 1, 1, "Pocket", [1], [0])
        root_tag["Width"] = nbt.TAG_Int(1)
        assertDecodeError(deflate(root_tag.save()), MissingField)

        root_tag = schematicTag(1, 1, 1, "Pocket", [1], [0])
        del root_tag["Data"]
        assertDecodeError(deflate(root_tag.save()), MissingField)

        assertDecodeError(schematicData(-1, 1, 1, "Pocket", [], []), MalformedTag)

        "Int arrays are not accepted for the block arrays"
        root_tag = schematicTag(2, 1, 1, "Pocket", [1, 1], [0, 0])
        root_tag["Blocks"] = nbt.TAG_Int_Array([300, 1000])
        assertDecodeError(deflate(root_tag.save()), MissingField)
        root_tag = schematicTag(1, 1, 1, "Pocket", [1], [0])
        root_tag["Data"] = nbt.TAG_Long_Array([0])
        assertDecodeError(deflate(root_tag.save()), MissingField)

        "A tag tree nested too deeply to read"
        nested = (b"\x0a\x00\x00" b"\x09\x00\x08Entities" +
                  struct.pack(">bi", 9, 1) * 5000 + struct.pack(">bi", 1, 0) +
                  b"\x00")
        assertDecodeError(deflate(nested), MalformedTag)
        self.assertRaises(DecodeError, fromString, deflate(nested))

        "Nothing was changed by the failed decodes"
        self.assertEqual(sch.size, (2, 2, 2))
        self.assertEqual(sch.Blocks.size, 8)

        self.assertRaises(DecodeError, fromString, b"garbage")

    def testMissingMaterials(self):
        data = schematicData(1, 1, 1, None, [1], [0])
        with self.assertLogs(schematic.log, "WARNING"):
            self.assertEqual(PocketSchematic().decode(data).Materials, "Pocket")
        self.assertEqual(LegacySchematic().decode(data).Materials, "Alpha")

        "Unrecognized materials are kept, and remapped like any legacy schematic"
        sch = PocketSchematic().decode(schematicData(1, 1, 1, "Indev", [95], [0]))
        self.assertEqual(sch.Materials, "Indev")
        self.assertEqual(sch.materials.name, "Unknown")
        self.assertEqual(next(sch.iterBlocks()).ID, 241)
        self.assertEqual(PocketSchematic().decode(sch.encode()).Materials, "Indev")

    def testVariantDetection(self):
        self.assertIsInstance(fromString(schematicData(1, 1, 1, "Pocket", [1], [0])), PocketSchematic)

        data = schematicData(1, 1, 1, "Alpha", [1], [0], TileEntities=nbt.TAG_List())
        sch = fromString(data)
        self.assertIsInstance(sch, LegacySchematic)
        self.assertIsNone(sch.Entities)

        "Legacy schematics are written with both lists"
        root_tag = nbt.load(buf=inflate(LegacySchematic((1, 1, 1)).encode()))
        self.assertIn("Entities", root_tag)
        self.assertIn("TileEntities", root_tag)
        self.assertNotIn("Entities", nbt.load(buf=inflate(PocketSchematic((1, 1, 1)).encode())))

    def testEntities(self):
        pig = nbt.TAG_Compound()
        pig["id"] = nbt.TAG_String("Pig")
        pig["Pos"] = nbt.TAG_List([nbt.TAG_Double(0.5), nbt.TAG_Double(1.0), nbt.TAG_Double(0.5)])
        entities = nbt.TAG_List([pig])

        chest = nbt.TAG_Compound()
        chest["id"] = nbt.TAG_String("Chest")
        chest["x"] = nbt.TAG_Int(0)
        tileEntities = nbt.TAG_List([chest])

        data = schematicData(1, 1, 1, "Alpha", [54], [2], Entities=entities, TileEntities=tileEntities)
        sch = fromString(data)
        self.assertEqual(sch.Entities, entities)
        self.assertEqual(sch.TileEntities, tileEntities)

        decoded = fromString(sch.encode())
        self.assertEqual(decoded.Entities, entities)
        self.assertEqual(decoded.TileEntities, tileEntities)
        self.assertEqual(decoded.Entities[0]["id"].value, "Pig")

    def testBlockList(self):
        "Legacy dimensions come from the held blocks"
        sch = LegacySchematic((5, 5, 5))
        sch.setBlockList([BlockDescriptor(1, 0, 3, 1, 0), BlockDescriptor(2, 4, 0, 0, 2)])
        data = sch.encode()
        self.assertEqual(sch.size, (4, 2, 3))

        decoded = fromString(data)
        self.assertEqual(decoded.size, (4, 2, 3))
        self.assertEqual(decoded.blockAt(3, 1, 0), 1)
        self.assertEqual(decoded.blockAt(0, 0, 2), 2)
        self.assertEqual(decoded.blockDataAt(0, 0, 2), 4)
        self.assertEqual(decoded.Blocks.sum(), 3)

        sch.setBlockList([BlockDescriptor(1, 0, 40000, 0, 0)])
        self.assertRaises(BufferSizeError, sch.encode)

        sch.setBlockList([])
        self.assertEqual(fromString(sch.encode()).size, (0, 0, 0))

    def testFixBlockIds(self):
        sch = fromString(schematicData(2, 1, 1, "Alpha", [95, 188], [3, 0], Entities=nbt.TAG_List()))
        self.assertEqual([(b.ID, b.blockData) for b in sch.blockList], [(95, 3), (188, 0)])

        sch.fixBlockIds()
        self.assertEqual([(b.ID, b.blockData) for b in sch.blockList], [(241, 3), (85, 1)])
        self.assertEqual([b.position for b in sch.blockList], [(0, 0, 0), (1, 0, 0)])

        decoded = fromString(sch.encode())
        self.assertEqual(list(decoded.Blocks), [241, 85])
        self.assertEqual(list(decoded.Data), [3, 1])

    def testLargeVolume(self):
        "A huge declared volume with tiny arrays is read one cell at a time"
        sch = PocketSchematic().decode(schematicData(32767, 32767, 32767, "Pocket", [1], []))
        blocks = sch.iterBlocks()
        self.assertEqual(next(blocks), BlockDescriptor(1, 0, 0, 0, 0))
        self.assertEqual(next(blocks), BlockDescriptor(0, 0, 0, 1, 0))
        self.assertEqual(sch.blockAt(0, 0, 0), 1)
        self.assertEqual(sch.blockAt(32766, 32766, 32766), 0)

        sch = LegacySchematic().decode(schematicData(32767, 32767, 32767, "Alpha", [95], [2]))
        self.assertEqual(next(sch.iterBlocks()), BlockDescriptor(241, 2, 0, 0, 0))

    def testBlockValues(self):
        "Ids must fit in a byte and data values in four bits"
        box = BoundingBox((0, 0, 0), (2, 1, 1))
        sch = PocketSchematic((1, 1, 1))
        for block in (BlockDescriptor(256, 0, 0, 0, 0), BlockDescriptor(-1, 0, 0, 0, 0),
                      BlockDescriptor(1, 16, 1, 0, 0)):
            self.assertRaises(ValueError, sch.setBlocks, box, [BlockDescriptor(1, 0, 0, 0, 0), block])
        self.assertEqual(sch.size, (1, 1, 1))

        sch.setBlocks(box, [BlockDescriptor(255, 15, 1, 0, 0)])
        self.assertEqual(list(sch.Blocks), [0, 255])
        self.assertEqual(list(sch.Data), [0, 15])

        legacy = LegacySchematic()
        legacy.setBlockList([BlockDescriptor(300, 0, 0, 0, 0)])
        self.assertRaises(ValueError, legacy.encode)
        self.assertEqual(legacy.size, (0, 0, 0))

    def testBufferGrowth(self):
        "Population grows its buffers as blocks are written"
        box = BoundingBox((0, 0, 0), (4, 4, 4))
        sch = PocketSchematic()
        with self.assertLogs(schematic.log, "DEBUG") as cm:
            sch.setBlocks(box, randomBlocks(box, seed=3))
        self.assertTrue(any("Growing" in line for line in cm.output))
        self.assertEqual(sch.Blocks.size, 64)
        self.assertEqual(sch.Data.size, 64)

    def testFixBlockIdsInArrays(self):
        "Without a held list, the arrays themselves are remapped"
        sch = fromString(schematicData(2, 1, 1, "Alpha", [126, 190], [1, 0], Entities=nbt.TAG_List()))
        sch.fixBlockIds()
        self.assertEqual(list(sch.Blocks), [158, 85])
        self.assertEqual(list(sch.Data), [1, 3])
        self.assertEqual([(b.ID, b.blockData) for b in sch.blockList], [(158, 1), (85, 3)])

        decoded = fromString(sch.encode())
        self.assertEqual(list(decoded.Blocks), [158, 85])

    def testFiles(self):
        box = BoundingBox((0, 0, 0), (3, 3, 3))
        sch = LegacySchematic()
        sch.setBlocks(box, randomBlocks(box, seed=2))

        temp = TempSchematic("testfiles.schematic", createFunc=sch.saveToFile)
        self.assertIsInstance(temp.schematic, LegacySchematic)
        self.assertEqual(temp.schematic.filename, temp.tmpname)
        self.assertSameContents(temp.schematic, sch)

        "Saving in place replaces the file"
        temp.schematic.setShape((1, 1, 1))
        temp.schematic.saveToFile()
        self.assertEqual(fromFile(temp.tmpname).size, (1, 1, 1))
        self.assertEqual([n for n in os.listdir(os.path.dirname(temp.tmpname))
                          if n.startswith(os.path.basename(temp.tmpname))], [os.path.basename(temp.tmpname)])

        with self.assertLogs(schematic.log, "WARNING"):
            PocketSchematic().saveToFile()

        missing = mktemp("missing.schematic")
        self.assertRaises(IOError, fromFile, missing)


class TestGrowableBuffer(unittest.TestCase):
    def testGrowth(self):
        buf = GrowableBuffer()
        buf[5] = 9
        buf[1] = 3
        self.assertEqual(len(buf), 6)
        self.assertEqual(buf[5], 9)
        self.assertEqual(buf[0], 0)
        self.assertEqual(list(buf.toArray(8)), [0, 3, 0, 0, 0, 9, 0, 0])

        self.assertRaises(IndexError, buf.__getitem__, 8)
        self.assertRaises(IndexError, buf.__setitem__, -1, 0)

    def testDoubling(self):
        buf = GrowableBuffer()
        for i in range(1000):
            buf[i] = i & 0xFF
        self.assertEqual(len(buf), 1000)
        self.assertEqual(buf.capacity, 1024)
        self.assertEqual(buf[999], 999 & 0xFF)


if __name__ == '__main__':
    unittest.main()
