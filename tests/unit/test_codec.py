"""
Unit tests for the entry and collection codec.

Tests cover:
- Entry construction (id, timestamp, document copy)
- Collection file encoding
- Decoding of empty, partial and malformed files
"""

import json
import re
import time

import pytest

from jsondb.errors import CorruptCollectionError, EmptyDocumentError, EncodeError
from jsondb.storage.codec import (
    Collection,
    Entry,
    Operation,
    build_entry,
    decode_collection,
    encode_collection,
)

HEX_ID = re.compile(r"^[0-9a-f]{32}$")


class TestBuildEntry:
    """Tests for build_entry."""

    def test_insert_entry_fields(self):
        """Insert entry has id, timestamp, op and document."""
        before = time.time_ns()
        entry = build_entry(Operation.INSERT, {"name": "Ada"})
        after = time.time_ns()

        assert HEX_ID.match(entry.id)
        assert before <= entry.ts <= after
        assert entry.op is Operation.INSERT
        assert entry.doc == {"name": "Ada"}

    def test_ids_are_unique(self):
        """Each entry gets a fresh id."""
        ids = {build_entry(Operation.INSERT, {"n": i}).id for i in range(100)}

        assert len(ids) == 100

    def test_document_is_copied(self):
        """Mutating the caller's document does not change the entry."""
        doc = {"tags": ["a"]}
        entry = build_entry(Operation.INSERT, doc)

        doc["tags"].append("b")

        assert entry.doc == {"tags": ["a"]}

    def test_document_canonical_form(self):
        """Tuples become lists, as they would after a round trip through the file."""
        entry = build_entry(Operation.INSERT, {"point": (1, 2)})

        assert entry.doc == {"point": [1, 2]}

    def test_insert_requires_document(self):
        """Insert without a document fails."""
        with pytest.raises(EmptyDocumentError) as exc_info:
            build_entry(Operation.INSERT, None)

        assert exc_info.value.operation == "insert"

    def test_delete_without_document(self):
        """Operations that carry no payload accept None."""
        entry = build_entry(Operation.DELETE)

        assert entry.op is Operation.DELETE
        assert entry.doc is None

    @pytest.mark.parametrize("doc", [{"when": object()}, {"x": float("nan")}, {1j: 2}])
    def test_unencodable_document(self, doc):
        """Non-JSON values raise EncodeError."""
        with pytest.raises(EncodeError):
            build_entry(Operation.INSERT, doc)

    def test_entry_is_immutable(self):
        """Entries are frozen."""
        entry = build_entry(Operation.INSERT, {"a": 1})

        with pytest.raises(AttributeError):
            entry.doc = {"a": 2}


class TestEncodeCollection:
    """Tests for encode_collection."""

    def test_empty_collection_keeps_entries_field(self):
        """Empty collection is written with an empty entries array."""
        data = encode_collection(Collection())

        assert json.loads(data) == {"entries": []}

    def test_field_names(self):
        """Entries use the fixed on-disk field names."""
        entry = Entry(id="a" * 32, ts=1700000000000000000, op=Operation.INSERT, doc={"k": "v"})

        data = json.loads(encode_collection(Collection(entries=[entry])))

        assert data == {
            "entries": [
                {"_id": "a" * 32, "ts": 1700000000000000000, "op": "insert", "doc": {"k": "v"}}
            ]
        }

    def test_doc_omitted_when_absent(self):
        """Entries without a document have no doc field."""
        entry = Entry(id="b" * 32, ts=1, op=Operation.DELETE)

        data = json.loads(encode_collection(Collection(entries=[entry])))

        assert "doc" not in data["entries"][0]

    def test_pretty_printed_utf8(self):
        """Output is indented, newline-terminated UTF-8 with literal non-ASCII."""
        entry = build_entry(Operation.INSERT, {"title": "日本語"})

        data = encode_collection(Collection(entries=[entry]))

        assert data.endswith(b"\n")
        assert b"\n  " in data
        assert "日本語".encode("utf-8") in data

    def test_custom_indent(self):
        """Indent can be changed or turned off."""
        compact = encode_collection(Collection(), indent=None)

        assert compact == b'{"entries": []}\n'


class TestDecodeCollection:
    """Tests for decode_collection."""

    def test_round_trip(self):
        """Decoding an encoded collection gives equal entries in order."""
        original = Collection(
            entries=[
                build_entry(Operation.INSERT, {"name": "Ada", "langs": ["en", "fr"]}),
                build_entry(Operation.INSERT, [1, 2, 3]),
                build_entry(Operation.INSERT, "plain string"),
                build_entry(Operation.DELETE),
            ]
        )

        decoded = decode_collection(encode_collection(original))

        assert decoded.entries == original.entries

    @pytest.mark.parametrize("data", [b"", b"   \n\t"])
    def test_empty_input(self, data):
        """Empty file is an empty collection."""
        assert decode_collection(data).entries == []

    @pytest.mark.parametrize("data", [b"{}", b'{"entries": null}'])
    def test_missing_entries_normalized(self, data):
        """Missing or null entries becomes an empty list."""
        collection = decode_collection(data)

        assert collection.entries == []
        assert len(collection) == 0

    @pytest.mark.parametrize(
        "data",
        [
            b"{not json",
            b'{"entries": [',
            b"[]",
            b'"entries"',
            b'{"entries": {}}',
            b'{"entries": [1]}',
            b'{"entries": [{"ts": 1, "op": "insert"}]}',
            b'{"entries": [{"_id": "x", "op": "insert"}]}',
            b'{"entries": [{"_id": "x", "ts": 1, "op": "upsert"}]}',
            b'{"entries": [{"_id": "x", "ts": "soon", "op": "insert"}]}',
            b'{"entries": [{"_id": 7, "ts": 1, "op": "insert"}]}',
            b"\xff\xfe",
        ],
    )
    def test_corrupt_input(self, data):
        """Malformed content raises CorruptCollectionError."""
        with pytest.raises(CorruptCollectionError) as exc_info:
            decode_collection(data, source="users.json")

        assert exc_info.value.code == "CORRUPT_COLLECTION"
        assert exc_info.value.path == "users.json"

    def test_unknown_top_level_fields_ignored(self):
        """Extra top-level fields do not break decoding."""
        collection = decode_collection(b'{"entries": [], "version": 2}')

        assert collection.entries == []
