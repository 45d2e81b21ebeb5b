"""Tests for paginated prefix listing."""

from __future__ import annotations

import pytest

from s3vfs.errors import NotFoundError, NotReadableError
from s3vfs.storage.keys import KeyMapper
from s3vfs.storage.lister import ObjectLister
from tests.fakes import TEST_BUCKET, FakeS3Client


@pytest.fixture
def lister(fake_s3: FakeS3Client) -> ObjectLister:
    return ObjectLister(fake_s3, TEST_BUCKET, KeyMapper())


class TestListChildren:
    """Tests for directory listings."""

    def test_files_and_directories(self, fake_s3: FakeS3Client, lister: ObjectLister) -> None:
        """Contents become files, common prefixes become directories."""
        fake_s3.add("docs/a.txt", b"aaa")
        fake_s3.add("docs/sub/b.txt", b"b")
        fake_s3.add("other.txt", b"x")

        children = {obj.full_path: obj for obj in lister.list_children("/docs")}

        assert set(children) == {"/docs/a.txt", "/docs/sub"}
        assert children["/docs/a.txt"].is_file
        assert children["/docs/a.txt"].size == 3
        assert children["/docs/a.txt"].last_modified is not None
        assert children["/docs/sub"].is_directory
        assert children["/docs/sub"].size is None

    def test_root_listing(self, fake_s3: FakeS3Client, lister: ObjectLister) -> None:
        fake_s3.add("a.txt")
        fake_s3.add("d/x")

        names = sorted(obj.name for obj in lister.list_children("/"))

        assert names == ["a.txt", "d"]

    def test_pagination_aggregates_all_children(self) -> None:
        """Truncated pages should be followed and yield each child exactly once."""
        fake_s3 = FakeS3Client(page_size=3)
        for i in range(10):
            fake_s3.add(f"dir/file-{i:02d}.txt")
        for i in range(4):
            fake_s3.add(f"dir/sub-{i}/inner-a")
            fake_s3.add(f"dir/sub-{i}/inner-b")
        lister = ObjectLister(fake_s3, TEST_BUCKET, KeyMapper())

        paths = [obj.full_path for obj in lister.list_children("/dir")]

        assert len(paths) == 14
        assert len(set(paths)) == 14
        assert len(fake_s3.calls_to("list_objects_v2")) > 1
        tokens = [call.get("ContinuationToken") for call in fake_s3.calls_to("list_objects_v2")]
        assert tokens[0] is None
        assert all(token for token in tokens[1:])

    def test_page_size_sets_max_keys(self, fake_s3: FakeS3Client) -> None:
        lister = ObjectLister(fake_s3, TEST_BUCKET, KeyMapper(), page_size=2)
        fake_s3.add("d/a")

        list(lister.list_children("/d"))

        assert fake_s3.calls_to("list_objects_v2")[0]["MaxKeys"] == 2

    def test_own_marker_skipped(self, fake_s3: FakeS3Client, lister: ObjectLister) -> None:
        """A directory's marker object must not appear as an unnamed child."""
        fake_s3.add("d/")
        fake_s3.add("d/x.txt")

        names = [obj.name for obj in lister.list_children("/d")]

        assert names == ["x.txt"]

    def test_file_wins_over_same_named_prefix(
        self, fake_s3: FakeS3Client, lister: ObjectLister
    ) -> None:
        """A stored key must not be hidden by keys nested under the same name."""
        fake_s3.add("a/x", b"data")
        fake_s3.add("a/x/y")

        children = list(lister.list_children("/a"))

        assert len(children) == 1
        assert children[0].full_path == "/a/x"
        assert children[0].is_file
        assert children[0].size == 4

    def test_file_wins_across_pages(self) -> None:
        fake_s3 = FakeS3Client(page_size=1)
        fake_s3.add("x", b"1")
        fake_s3.add("x/y")
        fake_s3.add("z")
        lister = ObjectLister(fake_s3, TEST_BUCKET, KeyMapper())

        children = {obj.full_path: obj for obj in lister.list_children("/")}

        assert set(children) == {"/x", "/z"}
        assert children["/x"].is_file

    def test_listing_is_restartable(self, fake_s3: FakeS3Client, lister: ObjectLister) -> None:
        fake_s3.add("d/a")
        fake_s3.add("d/b")

        first = list(lister.list_children("/d"))
        second = list(lister.list_children("/d"))

        assert first == second

    def test_root_dir_scoping(self, fake_s3: FakeS3Client) -> None:
        fake_s3.add("base/a.txt")
        fake_s3.add("elsewhere/b.txt")
        lister = ObjectLister(fake_s3, TEST_BUCKET, KeyMapper("/base"))

        paths = [obj.full_path for obj in lister.list_children("/")]

        assert paths == ["/a.txt"]

    def test_missing_bucket_is_not_found(self) -> None:
        lister = ObjectLister(FakeS3Client(), "no-such-bucket", KeyMapper())
        with pytest.raises(NotFoundError):
            list(lister.list_children("/"))

    def test_other_failures_are_not_readable(
        self, fake_s3: FakeS3Client, lister: ObjectLister
    ) -> None:
        fake_s3.fail("list_objects_v2", "AccessDenied", 403)
        with pytest.raises(NotReadableError) as exc_info:
            list(lister.list_children("/"))
        assert exc_info.value.cause is not None


class TestFind:
    """Tests for list-based lookup."""

    def test_find_file(self, fake_s3: FakeS3Client, lister: ObjectLister) -> None:
        fake_s3.add("a/b.txt", b"12345")
        fake_s3.add("a/b.txt.bak", b"1")

        obj = lister.find("/a/b.txt")

        assert obj is not None
        assert obj.is_file
        assert obj.size == 5

    def test_find_directory(self, fake_s3: FakeS3Client, lister: ObjectLister) -> None:
        fake_s3.add("a/b/c.txt")

        obj = lister.find("/a/b")

        assert obj is not None
        assert obj.is_directory

    def test_find_missing(self, fake_s3: FakeS3Client, lister: ObjectLister) -> None:
        fake_s3.add("a/bc")
        assert lister.find("/a/b") is None


class TestHasChildren:
    """Tests for the bounded child check."""

    def test_single_capped_request(self, fake_s3: FakeS3Client, lister: ObjectLister) -> None:
        """The check should issue one request with MaxKeys=1."""
        for i in range(5):
            fake_s3.add(f"d/{i}")

        assert lister.has_children("/d") is True

        calls = fake_s3.calls_to("list_objects_v2")
        assert len(calls) == 1
        assert calls[0]["MaxKeys"] == 1

    def test_marker_alone_is_empty(self, fake_s3: FakeS3Client, lister: ObjectLister) -> None:
        fake_s3.add("d/")
        assert lister.has_children("/d") is False

    def test_prefix_sibling_does_not_count(
        self, fake_s3: FakeS3Client, lister: ObjectLister
    ) -> None:
        fake_s3.add("dx/file")
        assert lister.has_children("/d") is False


class TestFirstKeys:
    def test_returns_nested_keys_including_markers(
        self, fake_s3: FakeS3Client, lister: ObjectLister
    ) -> None:
        fake_s3.add("d/")
        fake_s3.add("d/a")
        fake_s3.add("d/s/b")

        assert lister.first_keys("/d") == ["d/", "d/a", "d/s/b"]

    def test_limit(self, fake_s3: FakeS3Client, lister: ObjectLister) -> None:
        for i in range(5):
            fake_s3.add(f"d/{i}")
        assert len(lister.first_keys("/d", 2)) == 2
