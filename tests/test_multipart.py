"""Tests for speakcoach_proxy.utils.multipart module."""

import pytest

from speakcoach_proxy.utils.multipart import (
    DEFAULT_FILE_MEDIA_TYPE,
    DecodedForm,
    FileRecord,
    MissingBoundary,
    MultipartError,
    extract_boundary,
    parse_multipart,
)


def field_part(boundary: str, name: str, value: bytes) -> bytes:
    return (
        f"--{boundary}\r\n"
        f'Content-Disposition: form-data; name="{name}"\r\n'
        "\r\n"
    ).encode() + value + b"\r\n"


def file_part(boundary: str, name: str, filename: str, data: bytes, content_type: str = None) -> bytes:
    head = (
        f"--{boundary}\r\n"
        f'Content-Disposition: form-data; name="{name}"; filename="{filename}"\r\n'
    )
    if content_type:
        head += f"Content-Type: {content_type}\r\n"
    return (head + "\r\n").encode() + data + b"\r\n"


def closing(boundary: str) -> bytes:
    return f"--{boundary}--\r\n".encode()


class TestExtractBoundary:
    """Tests for extract_boundary helper."""

    def test_bare_boundary(self):
        assert extract_boundary("multipart/form-data; boundary=XYZ") == "XYZ"

    def test_boundary_followed_by_parameters(self):
        assert extract_boundary("multipart/form-data; boundary=abc123; charset=utf-8") == "abc123"

    def test_quoted_boundary(self):
        assert extract_boundary('multipart/form-data; boundary="with space"') == "with space"

    def test_parameter_name_is_case_insensitive(self):
        assert extract_boundary("multipart/form-data; Boundary=----WebKitFormBoundary7MA4") == "----WebKitFormBoundary7MA4"

    def test_missing_boundary(self):
        assert extract_boundary("multipart/form-data") is None

    def test_empty_header(self):
        assert extract_boundary(None) is None
        assert extract_boundary("") is None


class TestParseMultipart:
    """Tests for parse_multipart decoding."""

    def test_field_and_file_example(self):
        """Test the reference text + audio example decodes exactly."""
        body = (
            field_part("XYZ", "referenceText", b"The quick brown fox")
            + file_part("XYZ", "audio", "a.webm", b"\x00\x01\xff\x02", "audio/webm")
            + closing("XYZ")
        )

        form = parse_multipart(body, "XYZ")

        assert form.fields == {"referenceText": "The quick brown fox"}
        assert form.files == {
            "audio": FileRecord(filename="a.webm", media_type="audio/webm", data=b"\x00\x01\xff\x02")
        }

    def test_counts_match_fields_and_files(self):
        body = (
            field_part("b", "one", b"1")
            + field_part("b", "two", b"2")
            + field_part("b", "three", b"3")
            + file_part("b", "f1", "x.bin", b"x")
            + file_part("b", "f2", "y.bin", b"y")
            + closing("b")
        )

        form = parse_multipart(body, "b")

        assert len(form.fields) == 3
        assert len(form.files) == 2

    def test_duplicate_names_last_wins(self):
        body = (
            field_part("b", "referenceText", b"first")
            + field_part("b", "referenceText", b"second")
            + file_part("b", "audio", "1.wav", b"one", "audio/wav")
            + file_part("b", "audio", "2.wav", b"two", "audio/wav")
            + closing("b")
        )

        form = parse_multipart(body, "b")

        assert form.fields == {"referenceText": "second"}
        assert form.files["audio"].filename == "2.wav"
        assert form.files["audio"].data == b"two"

    def test_binary_payload_is_byte_identical(self):
        """Test every byte value survives decoding."""
        payload = bytes(range(256)) * 4
        body = file_part("bound", "audio", "all.bin", payload, "audio/webm") + closing("bound")

        form = parse_multipart(body, "bound")

        assert form.files["audio"].data == payload

    def test_payload_with_crlf_runs_is_preserved(self):
        payload = b"\r\n\r\nhead\r\n\r\ntail\r\n"
        body = file_part("bound", "audio", "crlf.bin", payload) + closing("bound")

        form = parse_multipart(body, "bound")

        assert form.files["audio"].data == payload

    def test_non_utf8_bytes_do_not_leak_into_latin1_text(self):
        payload = "héllo".encode("utf-8") + b"\xc3\x28\xe2\x82"
        body = file_part("bound", "audio", "a.bin", payload) + closing("bound")

        form = parse_multipart(body, "bound")

        assert form.files["audio"].data == payload

    def test_file_without_content_type_defaults_to_octet_stream(self):
        body = file_part("b", "audio", "raw.bin", b"\x10\x20") + closing("b")

        form = parse_multipart(body, "b")

        assert form.files["audio"].media_type == DEFAULT_FILE_MEDIA_TYPE == "application/octet-stream"

    def test_empty_filename_is_treated_as_field(self):
        body = file_part("b", "note", "", b"plain text", "text/plain") + closing("b")

        form = parse_multipart(body, "b")

        assert form.files == {}
        assert form.fields == {"note": "plain text"}

    def test_utf8_field_value(self):
        text = "Xin chào, tôi là học sinh"
        body = field_part("b", "referenceText", text.encode("utf-8")) + closing("b")

        form = parse_multipart(body, "b")

        assert form.fields["referenceText"] == text

    def test_empty_field_value(self):
        body = field_part("b", "topic", b"") + closing("b")

        form = parse_multipart(body, "b")

        assert form.fields == {"topic": ""}

    def test_filename_before_name_attribute(self):
        body = (
            b"--b\r\n"
            b'Content-Disposition: form-data; filename="a.wav"; name="audio"\r\n'
            b"Content-Type: audio/wav\r\n"
            b"\r\n"
            b"RIFF\r\n"
        ) + closing("b")

        form = parse_multipart(body, "b")

        assert list(form.files) == ["audio"]
        assert form.files["audio"].filename == "a.wav"

    def test_header_names_are_case_insensitive(self):
        body = (
            b"--b\r\n"
            b'content-disposition: form-data; name="audio"; filename="a.ogg"\r\n'
            b"CONTENT-TYPE: audio/ogg\r\n"
            b"\r\n"
            b"OggS\r\n"
        ) + closing("b")

        form = parse_multipart(body, "b")

        assert form.files["audio"].media_type == "audio/ogg"

    def test_preamble_and_epilogue_are_ignored(self):
        body = (
            b"This is the preamble.\r\n"
            + field_part("b", "a", b"1")
            + closing("b")
            + b"epilogue text\r\n"
        )

        form = parse_multipart(body, "b")

        assert form == DecodedForm(fields={"a": "1"}, files={})


class TestMalformedParts:
    """Tests that malformed parts are skipped without failing the decode."""

    def test_part_without_content_disposition_is_dropped(self):
        body = (
            b"--b\r\n"
            b"Content-Type: text/plain\r\n"
            b"\r\n"
            b"orphan\r\n"
            + field_part("b", "kept", b"yes")
            + closing("b")
        )

        form = parse_multipart(body, "b")

        assert form.fields == {"kept": "yes"}
        assert form.files == {}

    def test_part_without_header_separator_is_dropped(self):
        body = (
            b"--b\r\n"
            b'Content-Disposition: form-data; name="broken"\r\n'
            b"no blank line here\r\n"
            + field_part("b", "kept", b"yes")
            + closing("b")
        )

        form = parse_multipart(body, "b")

        assert form.fields == {"kept": "yes"}

    def test_part_without_name_is_dropped(self):
        body = (
            b"--b\r\n"
            b"Content-Disposition: form-data\r\n"
            b"\r\n"
            b"anonymous\r\n"
            + file_part("b", "audio", "a.wav", b"data", "audio/wav")
            + closing("b")
        )

        form = parse_multipart(body, "b")

        assert form.fields == {}
        assert list(form.files) == ["audio"]

    def test_invalid_utf8_field_is_dropped(self):
        body = field_part("b", "bad", b"\xff\xfe\xfd") + field_part("b", "good", b"ok") + closing("b")

        form = parse_multipart(body, "b")

        assert form.fields == {"good": "ok"}

    def test_body_without_parts(self):
        form = parse_multipart(b"", "b")

        assert form.fields == {}
        assert form.files == {}


class TestMissingBoundary:
    """Tests for the fatal missing boundary error."""

    @pytest.mark.parametrize("boundary", [None, ""])
    def test_missing_boundary_raises(self, boundary):
        body = field_part("b", "a", b"1") + closing("b")

        with pytest.raises(MissingBoundary):
            parse_multipart(body, boundary)

    def test_boundary_outside_latin1_raises(self):
        with pytest.raises(MissingBoundary, match="Invalid multipart boundary"):
            parse_multipart(b"", "\u2603")

    def test_missing_boundary_is_a_multipart_error(self):
        assert issubclass(MissingBoundary, MultipartError)
        assert str(MissingBoundary()) == "Missing multipart boundary"
