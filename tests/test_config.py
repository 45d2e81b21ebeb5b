"""Tests for filesystem options resolution and environment loading."""

from __future__ import annotations

import pytest

from s3vfs.config import (
    DEFAULT_MULTIPART_CHUNK_SIZE,
    OptionsError,
    ReadMethod,
    S3FileSystemOptions,
    WriteMethod,
    load_options_from_env,
    resolve_options,
)
from s3vfs.storage.keys import KeyMapper

ENV_VARS = [
    "S3VFS_ROOT_DIR",
    "S3VFS_METHOD_OF_READ",
    "S3VFS_METHOD_OF_WRITE",
    "S3VFS_NO_CACHE",
    "S3VFS_SIGNED_URL_EXPIRY_SECONDS",
    "S3VFS_USE_INDEX",
    "S3VFS_GET_OBJECT_USING_LIST_OBJECT",
    "S3VFS_VERIFY_DIRECTORIES",
    "S3VFS_MULTIPART_CHUNK_SIZE",
]


@pytest.fixture(autouse=True)
def clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestDefaults:
    """Tests for default option values."""

    def test_defaults(self) -> None:
        options = resolve_options()
        assert options.root_dir == ""
        assert options.method_of_read is ReadMethod.DIRECT
        assert options.method_of_write is WriteMethod.PUT_OBJECT
        assert options.no_cache is False
        assert options.signed_url_expiry_seconds == 3600
        assert options.use_index is False
        assert options.get_object_using_list_object is False
        assert options.verify_directories is True
        assert options.multipart_chunk_size == DEFAULT_MULTIPART_CHUNK_SIZE

    def test_options_are_immutable(self) -> None:
        options = S3FileSystemOptions()
        with pytest.raises(AttributeError):
            options.use_index = True  # type: ignore[misc]


class TestResolveOptions:
    """Tests for resolve_options."""

    def test_camel_case_names(self) -> None:
        """Option names used by other clients of the layout should be accepted."""
        options = resolve_options(
            {"rootDir": "data/", "methodOfWrite": "multipart", "useIndex": True, "noCache": True}
        )
        assert options.root_dir == "/data"
        assert options.method_of_write is WriteMethod.MULTIPART
        assert options.use_index is True
        assert options.no_cache is True

    def test_snake_case_overrides(self) -> None:
        options = resolve_options(method_of_read="presignedUrl", signed_url_expiry_seconds=60)
        assert options.method_of_read is ReadMethod.PRESIGNED_URL
        assert options.signed_url_expiry_seconds == 60

    def test_does_not_mutate_input(self) -> None:
        """Resolving must return a new value and leave the input untouched."""
        base = S3FileSystemOptions(root_dir="/a")
        raw = {"useIndex": True}
        resolved = resolve_options(base, **raw)
        assert base.use_index is False
        assert resolved.use_index is True
        assert resolved.root_dir == "/a"
        assert raw == {"useIndex": True}

    def test_existing_options_returned_as_is(self) -> None:
        base = S3FileSystemOptions(use_index=True)
        assert resolve_options(base) is base

    def test_unknown_option_rejected(self) -> None:
        with pytest.raises(OptionsError, match="Unknown filesystem option"):
            resolve_options({"bogus": 1})

    def test_bad_enum_value_rejected(self) -> None:
        with pytest.raises(OptionsError, match="method_of_write"):
            resolve_options(method_of_write="carrierPigeon")

    @pytest.mark.parametrize(
        "override",
        [
            {"signed_url_expiry_seconds": 0},
            {"multipart_chunk_size": -1},
            {"signed_url_cache_size": -1},
            {"http_timeout_seconds": 0},
        ],
    )
    def test_invalid_numbers_rejected(self, override: dict[str, int]) -> None:
        with pytest.raises(OptionsError):
            resolve_options(**override)

    @pytest.mark.parametrize(
        ("options", "field"),
        [
            ({"useIndex": "false"}, "use_index"),
            ({"noCache": "0"}, "no_cache"),
            ({"verifyDirectories": 1}, "verify_directories"),
            ({"signedUrlExpirySeconds": "60"}, "signed_url_expiry_seconds"),
            ({"multipartChunkSize": 5.5}, "multipart_chunk_size"),
            ({"signedUrlCacheSize": True}, "signed_url_cache_size"),
            ({"httpTimeoutSeconds": "30"}, "http_timeout_seconds"),
            ({"rootDir": 7}, "root_dir"),
        ],
    )
    def test_wrong_value_types_rejected(self, options: dict[str, object], field: str) -> None:
        """String flags such as "false" must not slip through as truthy values."""
        with pytest.raises(OptionsError, match=field):
            resolve_options(options)

    def test_float_timeout_accepted(self) -> None:
        assert resolve_options(http_timeout_seconds=2.5).http_timeout_seconds == 2.5

    def test_root_dir_slashes_collapse_to_bucket_root(self) -> None:
        assert resolve_options(root_dir="///").root_dir == ""

    @pytest.mark.parametrize(
        ("root_dir", "expected"),
        [
            ("/a/../b/", "/b"),
            ("a/./b", "/a/b"),
            ("/a/..", ""),
        ],
    )
    def test_root_dir_dot_segments_resolved(self, root_dir: str, expected: str) -> None:
        """The stored root matches the prefix the key mapper actually uses."""
        options = resolve_options(root_dir=root_dir)
        assert options.root_dir == expected
        assert KeyMapper(options.root_dir).root_dir == expected


class TestLoadOptionsFromEnv:
    """Tests for S3VFS_* environment variables."""

    def test_empty_environment_gives_defaults(self) -> None:
        assert load_options_from_env() == S3FileSystemOptions()

    def test_reads_all_variables(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("S3VFS_ROOT_DIR", "/tenant/files/")
        monkeypatch.setenv("S3VFS_METHOD_OF_READ", "presignedUrl")
        monkeypatch.setenv("S3VFS_METHOD_OF_WRITE", "managedUpload")
        monkeypatch.setenv("S3VFS_NO_CACHE", "yes")
        monkeypatch.setenv("S3VFS_SIGNED_URL_EXPIRY_SECONDS", "120")
        monkeypatch.setenv("S3VFS_USE_INDEX", "1")
        monkeypatch.setenv("S3VFS_GET_OBJECT_USING_LIST_OBJECT", "true")
        monkeypatch.setenv("S3VFS_VERIFY_DIRECTORIES", "0")
        monkeypatch.setenv("S3VFS_MULTIPART_CHUNK_SIZE", "6291456")

        options = load_options_from_env()

        assert options.root_dir == "/tenant/files"
        assert options.method_of_read is ReadMethod.PRESIGNED_URL
        assert options.method_of_write is WriteMethod.MANAGED_UPLOAD
        assert options.no_cache is True
        assert options.signed_url_expiry_seconds == 120
        assert options.use_index is True
        assert options.get_object_using_list_object is True
        assert options.verify_directories is False
        assert options.multipart_chunk_size == 6291456

    def test_malformed_boolean_names_variable(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("S3VFS_USE_INDEX", "maybe")
        with pytest.raises(OptionsError, match="S3VFS_USE_INDEX"):
            load_options_from_env()

    def test_malformed_integer_names_variable(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("S3VFS_MULTIPART_CHUNK_SIZE", "big")
        with pytest.raises(OptionsError, match="S3VFS_MULTIPART_CHUNK_SIZE"):
            load_options_from_env()

    def test_non_positive_integer_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("S3VFS_SIGNED_URL_EXPIRY_SECONDS", "0")
        with pytest.raises(OptionsError, match="S3VFS_SIGNED_URL_EXPIRY_SECONDS"):
            load_options_from_env()

    def test_unsupported_method_names_variable(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("S3VFS_METHOD_OF_READ", "telepathy")
        with pytest.raises(OptionsError, match="S3VFS_METHOD_OF_READ"):
            load_options_from_env()
