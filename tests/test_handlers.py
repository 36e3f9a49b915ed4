"""
Тесты обработчиков маршрутов.
"""
import pytest

from tinyhttp.file_store import FileStore
from tinyhttp.handlers import echo, publish_file, read_file, root, user_agent
from tinyhttp.utils.http import HttpRequest, HttpStatus


def test_root():
    response = root(HttpRequest())
    assert response.status is HttpStatus.OK
    assert response.body is None


class TestEcho:

    def test_echoes_argument(self):
        response = echo(HttpRequest(route_args={"str": "hello-world"}))
        assert response.status is HttpStatus.OK
        assert response.content_type == "text/plain"
        assert response.body == "hello-world"

    @pytest.mark.parametrize("args", [{}, {"str": ""}, {"str": "   "}])
    def test_blank_argument(self, args):
        assert echo(HttpRequest(route_args=args)).status is HttpStatus.BAD_REQUEST


class TestUserAgent:

    @pytest.mark.parametrize("agent", ["Mozilla/5.0", "curl/7.68.0", "MyCustomAgent/1.0"])
    def test_returns_header(self, agent):
        response = user_agent(HttpRequest(headers={"user-agent": agent}))
        assert response.status is HttpStatus.OK
        assert response.content_type == "text/plain"
        assert response.body == agent

    @pytest.mark.parametrize("headers", [{}, {"user-agent": "  "}])
    def test_missing_header(self, headers):
        assert user_agent(HttpRequest(headers=headers)).status is HttpStatus.BAD_REQUEST


class TestReadFile:

    def test_existing_file(self, store):
        response = read_file(HttpRequest(route_args={"filename": "existing.txt"}), store)
        assert response.status is HttpStatus.OK
        assert response.content_type == "application/octet-stream"
        assert response.body == "old content"

    def test_missing_file(self, store):
        response = read_file(HttpRequest(route_args={"filename": "nope.txt"}), store)
        assert response.status is HttpStatus.NOT_FOUND

    def test_blank_filename(self, store):
        response = read_file(HttpRequest(route_args={"filename": " "}), store)
        assert response.status is HttpStatus.BAD_REQUEST


class TestPublishFile:

    def test_creates_new_file(self, store):
        request = HttpRequest(route_args={"filename": "newfile.txt"}, body="New file content")
        response = publish_file(request, store)
        assert response.status is HttpStatus.CREATED
        assert store.writes == [("newfile.txt", "New file content")]

    def test_existing_file_not_overwritten(self, store):
        request = HttpRequest(route_args={"filename": "existing.txt"}, body="replacement")
        response = publish_file(request, store)
        assert response.status is HttpStatus.BAD_REQUEST
        assert store.writes == []
        assert store.files["existing.txt"] == "old content"

    @pytest.mark.parametrize("body", [None, "", "  \n"])
    def test_blank_body(self, store, body):
        request = HttpRequest(route_args={"filename": "a.txt"}, body=body)
        assert publish_file(request, store).status is HttpStatus.BAD_REQUEST
        assert store.writes == []

    def test_blank_filename(self, store):
        request = HttpRequest(route_args={"filename": ""}, body="data")
        assert publish_file(request, store).status is HttpStatus.BAD_REQUEST


class TestFileStore:

    def test_create_read_exists(self, tmp_path):
        file_store = FileStore(tmp_path)
        assert not file_store.exists("a.txt")

        file_store.create_and_write("a.txt", "line1\r\nline2\n")
        assert file_store.exists("a.txt")
        assert file_store.read_text("a.txt") == "line1\r\nline2\n"
        assert (tmp_path / "a.txt").read_bytes() == b"line1\r\nline2\n"

    def test_create_refuses_existing(self, tmp_path):
        (tmp_path / "a.txt").write_text("old")
        with pytest.raises(FileExistsError):
            FileStore(tmp_path).create_and_write("a.txt", "new")
        assert (tmp_path / "a.txt").read_text() == "old"
