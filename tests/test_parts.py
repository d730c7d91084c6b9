"""Tests for the MIME part tree built from Gmail payloads."""

from gmcli.compose.parts import MimeLeaf, MimeNode, find_part, part_from_payload


class TestPartFromPayload:
    """Tests for part_from_payload."""

    def test_leaf_payload(self, b64url):
        """A payload without parts becomes a decoded leaf."""
        payload = {
            "mimeType": "text/plain",
            "headers": [{"name": "Content-Type", "value": "text/plain; charset=UTF-8"}],
            "body": {"data": b64url("Hello")},
        }

        part = part_from_payload(payload)

        assert part == MimeLeaf(content_type="text/plain", data=b"Hello", charset="utf-8")

    def test_nested_payload(self, b64url):
        """Nested parts become a tree in the same order."""
        payload = {
            "mimeType": "multipart/mixed",
            "parts": [
                {
                    "mimeType": "multipart/alternative",
                    "parts": [
                        {"mimeType": "text/plain", "body": {"data": b64url("plain")}},
                        {"mimeType": "text/html", "body": {"data": b64url("<p>html</p>")}},
                    ],
                },
                {
                    "mimeType": "application/pdf",
                    "filename": "report.pdf",
                    "body": {"attachmentId": "ANGjdJ8", "size": 1234},
                },
            ],
        }

        part = part_from_payload(payload)

        assert isinstance(part, MimeNode)
        assert part.content_type == "multipart/mixed"
        alternative, attachment = part.parts
        assert isinstance(alternative, MimeNode)
        assert [child.content_type for child in alternative.parts] == ["text/plain", "text/html"]
        assert attachment == MimeLeaf(
            content_type="application/pdf", data=b"", filename="report.pdf"
        )

    def test_unpadded_base64url(self):
        """Gmail omits base64 padding; decoding tolerates it."""
        payload = {"mimeType": "text/plain", "body": {"data": "SGk"}}

        assert part_from_payload(payload).data == b"Hi"

    def test_charset_from_header(self):
        """Leaf text is decoded with the declared charset."""
        payload = {
            "mimeType": "text/plain",
            "headers": [{"name": "content-type", "value": 'text/plain; charset="iso-8859-1"'}],
            "body": {"data": "Y2Fm6Q=="},  # "café" in latin-1
        }

        part = part_from_payload(payload)

        assert part.charset == "iso-8859-1"
        assert part.text() == "café"

    def test_unknown_charset_falls_back_to_utf8(self):
        """An unknown charset name does not raise."""
        leaf = MimeLeaf(content_type="text/plain", data="héllo".encode(), charset="x-bogus")

        assert leaf.text() == "héllo"


class TestFindPart:
    """Tests for find_part."""

    def test_leaf_match(self):
        """A matching leaf is returned directly."""
        leaf = MimeLeaf("text/plain", b"hi")

        assert find_part(leaf, "text/plain") is leaf

    def test_leaf_mismatch(self):
        """A leaf of another type yields None."""
        assert find_part(MimeLeaf("text/html", b"<p>"), "text/plain") is None

    def test_empty_leaf_is_skipped(self):
        """Leaves without data never match."""
        assert find_part(MimeLeaf("text/plain", b""), "text/plain") is None

    def test_direct_child_beats_nested(self):
        """A direct child wins over a match inside an earlier sibling."""
        nested = MimeLeaf("text/plain", b"nested")
        direct = MimeLeaf("text/plain", b"direct")
        tree = MimeNode(
            "multipart/mixed",
            (MimeNode("multipart/alternative", (nested,)), direct),
        )

        assert find_part(tree, "text/plain") is direct

    def test_recurses_depth_first(self):
        """Without a direct match, children are searched in order."""
        first = MimeLeaf("text/html", b"<p>first</p>")
        second = MimeLeaf("text/html", b"<p>second</p>")
        tree = MimeNode(
            "multipart/mixed",
            (
                MimeNode("multipart/related", (MimeNode("multipart/alternative", (first,)),)),
                MimeNode("multipart/alternative", (second,)),
            ),
        )

        assert find_part(tree, "text/html") is first

    def test_no_match(self):
        """A tree without the type yields None."""
        tree = MimeNode("multipart/mixed", (MimeLeaf("application/pdf", b"%PDF"),))

        assert find_part(tree, "text/plain") is None
