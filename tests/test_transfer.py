import os
import tempfile
import unittest

from fakes import FakeClock, FakeHDFS
from hdfscli.client import BUFFER_SIZE
from hdfscli.errors import AlreadyExistsError, NotFoundError
from hdfscli.lease import LeaseOutcome, LeaseWaiter
from hdfscli.transfer import TransferEngine, TransferMode


class TransferTestCase(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.local = self.tmp.name
        self.fs = FakeHDFS()
        self.clock = FakeClock()
        self.waiter = LeaseWaiter(self.fs, clock=self.clock, sleep=self.clock.sleep)
        self.engine = TransferEngine(self.fs, self.waiter)

    def tearDown(self):
        self.tmp.cleanup()

    def write_local(self, name, data):
        path = os.path.join(self.local, name)
        with open(path, "wb") as f:
            f.write(data)
        return path


class TestPut(TransferTestCase):
    def test_put_streams_whole_file(self):
        data = os.urandom(BUFFER_SIZE * 3 + 17)
        src = self.write_local("blob.bin", data)
        result = self.engine.put(src, "/home/alice")
        self.assertEqual(self.fs.files["/home/alice/blob.bin"], data)
        self.assertEqual(result.size, len(data))
        self.assertEqual(result.request.mode, TransferMode.PUT)
        self.assertEqual(result.request.dest, "/home/alice/blob.bin")

    def test_put_sends_bounded_chunks(self):
        chunks = []

        def create(path, stream):
            chunks.extend(stream)

        self.fs.create = create
        src = self.write_local("blob.bin", b"x" * (BUFFER_SIZE * 2 + 1))
        self.engine.put(src, "/home/alice")
        self.assertEqual([len(c) for c in chunks], [BUFFER_SIZE, BUFFER_SIZE, 1])

    def test_put_missing_source(self):
        with self.assertRaises(NotFoundError):
            self.engine.put(os.path.join(self.local, "notes.txt"), "/home/alice")
        self.assertEqual(self.fs.files, {})

    def test_put_refuses_overwrite(self):
        self.fs.create("/home/alice/notes.txt", [b"old"])
        src = self.write_local("notes.txt", b"new")
        with self.assertRaises(AlreadyExistsError):
            self.engine.put(src, "/home/alice")
        self.assertEqual(self.fs.files["/home/alice/notes.txt"], b"old")

    def test_put_empty_file(self):
        src = self.write_local("empty", b"")
        result = self.engine.put(src, "/home/alice")
        self.assertEqual(self.fs.files["/home/alice/empty"], b"")
        self.assertEqual(result.size, 0)


class TestGet(TransferTestCase):
    def test_get(self):
        self.fs.create("/home/alice/data.csv", [b"a,b\n1,2\n"])
        result = self.engine.get("/home/alice/data.csv", self.local)
        with open(os.path.join(self.local, "data.csv"), "rb") as f:
            self.assertEqual(f.read(), b"a,b\n1,2\n")
        self.assertEqual(result.size, 8)
        self.assertEqual(result.request.mode, TransferMode.GET)

    def test_get_missing_source(self):
        with self.assertRaises(NotFoundError):
            self.engine.get("/home/alice/missing", self.local)
        self.assertEqual(os.listdir(self.local), [])

    def test_get_directory_creates_nothing(self):
        self.fs.mkdirs("/home/alice/reports")
        with self.assertRaises(NotFoundError):
            self.engine.get("/home/alice/reports", self.local)
        self.assertEqual(os.listdir(self.local), [])

    def test_get_refuses_overwrite(self):
        self.fs.create("/home/alice/data.csv", [b"remote"])
        self.write_local("data.csv", b"local")
        with self.assertRaises(AlreadyExistsError):
            self.engine.get("/home/alice/data.csv", self.local)
        with open(os.path.join(self.local, "data.csv"), "rb") as f:
            self.assertEqual(f.read(), b"local")

    def test_round_trip(self):
        data = os.urandom(BUFFER_SIZE * 5 + 3)
        src = self.write_local("payload.bin", data)
        self.engine.put(src, "/home/alice")
        with tempfile.TemporaryDirectory() as other:
            self.engine.get("/home/alice/payload.bin", other)
            with open(os.path.join(other, "payload.bin"), "rb") as f:
                self.assertEqual(f.read(), data)


class TestAppend(TransferTestCase):
    def test_append_concatenates_and_waits(self):
        self.fs.create("/home/alice/log.txt", [b"first\n"])
        self.fs.open_for = 2
        src = self.write_local("more.txt", b"second\n")
        result = self.engine.append(src, "/home/alice/log.txt")
        self.assertEqual(result.lease, LeaseOutcome.CLOSED)
        self.assertEqual(result.size, 7)
        self.assertEqual(self.fs.lease_requests, ["/home/alice/log.txt"])
        self.assertEqual(b"".join(self.fs.open("/home/alice/log.txt")), b"first\nsecond\n")

    def test_append_resets_replication(self):
        self.fs.create("/home/alice/log.txt", [b"x"])
        self.fs.replication["/home/alice/log.txt"] = 5
        self.fs.default_replication = 2
        src = self.write_local("more.txt", b"y")
        self.engine.append(src, "/home/alice/log.txt")
        self.assertEqual(self.fs.replication["/home/alice/log.txt"], 2)

    def test_append_missing_local(self):
        self.fs.create("/home/alice/log.txt", [b"x"])
        with self.assertRaises(NotFoundError):
            self.engine.append(os.path.join(self.local, "nope"), "/home/alice/log.txt")
        self.assertEqual(self.fs.files["/home/alice/log.txt"], b"x")
        self.assertEqual(self.fs.lease_requests, [])

    def test_append_missing_remote(self):
        src = self.write_local("more.txt", b"y")
        with self.assertRaises(NotFoundError):
            self.engine.append(src, "/home/alice/log.txt")
        self.assertNotIn("/home/alice/log.txt", self.fs.files)

    def test_append_reports_timeout(self):
        self.fs.create("/home/alice/log.txt", [b"x"])
        self.fs.open_for = 10 ** 6
        src = self.write_local("more.txt", b"y")
        with self.assertLogs("hdfscli.lease", level="WARNING"):
            result = self.engine.append(src, "/home/alice/log.txt")
        self.assertEqual(result.lease, LeaseOutcome.TIMED_OUT)
        self.assertLessEqual(self.clock.now, 60)
        self.assertEqual(self.fs.files["/home/alice/log.txt"], b"xy")


if __name__ == '__main__':
    unittest.main()
