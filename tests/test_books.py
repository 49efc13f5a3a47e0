"""Tests for the book catalog: admin CRUD with uploads, public browsing, gated download."""

import unittest

from app.models.book import Book
from app.schemas.books import normalize_isbn
from tests.support import ApiTestCase

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32
PDF_BYTES = b"%PDF-1.4\n% test book\n%%EOF\n"


def _fields(**overrides: object) -> dict[str, str]:
    fields = {
        "title": "Dune",
        "author": "Frank Herbert",
        "description": "A desert planet and its spice.",
        "category": "FICTION",
        "pages": "412",
        "price": "0",
        "isbn": "978-0441013593",
        "is_premium": "false",
    }
    fields.update({k: str(v) for k, v in overrides.items()})
    return fields


def _cover() -> tuple[str, tuple]:
    return ("coverImage", ("cover.png", PNG_BYTES, "image/png"))


def _pdf() -> tuple[str, tuple]:
    return ("bookFile", ("dune.pdf", PDF_BYTES, "application/pdf"))


class TestNormalizeIsbn(unittest.TestCase):
    def test_accepts_common_forms(self) -> None:
        self.assertEqual(normalize_isbn("978-0441013593"), "9780441013593")
        self.assertEqual(normalize_isbn("ISBN-13: 978-0-441-01359-3"), "9780441013593")
        self.assertEqual(normalize_isbn("044101359x"), "044101359X")

    def test_rejects_garbage(self) -> None:
        for bad in ("12345", "97804410135931", "ISBN abc"):
            with self.assertRaises(ValueError):
                normalize_isbn(bad)


class TestBooks(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        _, self.admin_token = self.register_admin()
        _, self.user_token = self.register_user("reader@x.com")

    def create(self, files: list | None = None, token: str | None = None, **overrides: object):
        return self.client.post(
            f"{self.api}/books",
            data=_fields(**overrides),
            files=files if files is not None else [_cover(), _pdf()],
            headers=self.bearer(token or self.admin_token),
        )

    def stored(self, url: str | None):
        self.assertTrue(url and url.startswith("/uploads/"))
        return self.upload_dir / url[len("/uploads/"):]

    def stored_pdf(self, book_id: str):
        """Location of the book's PDF in storage; it is not part of the public payload."""
        with self.database.session() as db:
            return self.stored(db.get(Book, book_id).file_url)

    def test_create_free_book(self) -> None:
        resp = self.create()
        self.assertEqual(resp.status_code, 201, resp.text)
        book = resp.json()
        self.assertEqual(book["title"], "Dune")
        self.assertEqual(book["pages"], 412)
        self.assertEqual(book["isbn"], "9780441013593")
        self.assertFalse(book["is_premium"])
        self.assertTrue(book["cover_image_url"].startswith("/uploads/covers/coverImage-"))
        self.assertTrue(book["has_file"])
        self.assertNotIn("file_url", book)
        pdf = self.stored_pdf(book["id"])
        self.assertTrue(pdf.name.startswith("bookFile-"))
        self.assertEqual(pdf.read_bytes(), PDF_BYTES)
        self.assertTrue(self.stored(book["cover_image_url"]).is_file())

    def test_listing_and_detail_are_public(self) -> None:
        book_id = self.create().json()["id"]
        listing = self.client.get(f"{self.api}/books")
        self.assertEqual(listing.status_code, 200)
        self.assertEqual([b["id"] for b in listing.json()], [book_id])
        detail = self.client.get(f"{self.api}/books/{book_id}")
        self.assertEqual(detail.status_code, 200)
        self.assertEqual(detail.json()["author"], "Frank Herbert")
        self.assertEqual(self.client.get(f"{self.api}/books/missing").status_code, 404)

    def test_create_requires_admin(self) -> None:
        self.assertEqual(self.create(token=self.user_token).status_code, 403)
        resp = self.client.post(f"{self.api}/books", data=_fields(), files=[_cover(), _pdf()])
        self.assertEqual(resp.status_code, 401)

    def test_cover_required(self) -> None:
        resp = self.create(files=[_pdf()])
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["errors"][0]["field"], "coverImage")

    def test_pdf_required_for_free_books(self) -> None:
        resp = self.create(files=[_cover()])
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["errors"][0]["field"], "bookFile")
        self.assertEqual(list((self.upload_dir / "covers").glob("*")), [])

    def test_premium_book_without_pdf(self) -> None:
        resp = self.create(files=[_cover()], is_premium="true", price="9.99")
        self.assertEqual(resp.status_code, 201, resp.text)
        self.assertFalse(resp.json()["has_file"])
        self.assertEqual(resp.json()["price"], 9.99)

    def test_invalid_fields_reported(self) -> None:
        resp = self.create(pages="-3", description="short", isbn="12")
        self.assertEqual(resp.status_code, 400)
        fields = {e["field"] for e in resp.json()["errors"]}
        self.assertEqual(fields, {"pages", "description", "isbn"})

    def test_wrong_file_types_rejected(self) -> None:
        resp = self.create(files=[("coverImage", ("cover.pdf", PDF_BYTES, "application/pdf")), _pdf()])
        self.assertEqual(resp.status_code, 400)
        resp = self.create(files=[_cover(), ("bookFile", ("dune.txt", b"text", "text/plain"))])
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(list((self.upload_dir / "covers").glob("*")), [])

    def test_update_replaces_cover_and_removes_old_file(self) -> None:
        book = self.create().json()
        old_cover = self.stored(book["cover_image_url"])
        pdf = self.stored_pdf(book["id"])
        resp = self.client.put(
            f"{self.api}/books/{book['id']}",
            data=_fields(title="Dune Messiah"),
            files=[("coverImage", ("new.jpg", PNG_BYTES, "image/jpeg"))],
            headers=self.bearer(self.admin_token),
        )
        self.assertEqual(resp.status_code, 200, resp.text)
        updated = resp.json()
        self.assertEqual(updated["title"], "Dune Messiah")
        self.assertNotEqual(updated["cover_image_url"], book["cover_image_url"])
        self.assertTrue(updated["has_file"])
        self.assertEqual(self.stored_pdf(book["id"]), pdf)
        self.assertTrue(pdf.is_file())
        self.assertFalse(old_cover.exists())
        self.assertTrue(self.stored(updated["cover_image_url"]).is_file())

    def test_update_to_premium_drops_pdf(self) -> None:
        book = self.create().json()
        old_pdf = self.stored_pdf(book["id"])
        resp = self.client.put(
            f"{self.api}/books/{book['id']}",
            data=_fields(is_premium="true"),
            headers=self.bearer(self.admin_token),
        )
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertFalse(resp.json()["has_file"])
        self.assertFalse(old_pdf.exists())

    def test_update_free_book_without_any_pdf_rejected(self) -> None:
        book = self.create(files=[_cover()], is_premium="true").json()
        resp = self.client.put(
            f"{self.api}/books/{book['id']}",
            data=_fields(is_premium="false"),
            headers=self.bearer(self.admin_token),
        )
        self.assertEqual(resp.status_code, 400)

    def test_update_missing_book(self) -> None:
        resp = self.client.put(
            f"{self.api}/books/missing",
            data=_fields(),
            headers=self.bearer(self.admin_token),
        )
        self.assertEqual(resp.status_code, 404)

    def test_delete_removes_row_and_files(self) -> None:
        book = self.create().json()
        files = [self.stored(book["cover_image_url"]), self.stored_pdf(book["id"])]
        resp = self.client.delete(f"{self.api}/books/{book['id']}", headers=self.bearer(self.admin_token))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"message": "Book deleted successfully."})
        self.assertEqual(self.client.get(f"{self.api}/books/{book['id']}").status_code, 404)
        for f in files:
            self.assertFalse(f.exists())

    def test_download_free_book(self) -> None:
        book_id = self.create().json()["id"]
        resp = self.client.get(
            f"{self.api}/books/download/{book_id}",
            headers=self.bearer(self.user_token),
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.content, PDF_BYTES)
        self.assertEqual(resp.headers["content-type"], "application/pdf")
        self.assertIn("Dune.pdf", resp.headers["content-disposition"])

    def test_download_requires_authentication(self) -> None:
        book_id = self.create().json()["id"]
        self.assertEqual(self.client.get(f"{self.api}/books/download/{book_id}").status_code, 401)

    def test_download_premium_refused(self) -> None:
        book_id = self.create(is_premium="true").json()["id"]
        resp = self.client.get(
            f"{self.api}/books/download/{book_id}",
            headers=self.bearer(self.user_token),
        )
        self.assertEqual(resp.status_code, 403)
        self.assertIn("premium", resp.json()["message"])

    def test_download_missing_file_on_disk(self) -> None:
        book = self.create().json()
        self.stored_pdf(book["id"]).unlink()
        resp = self.client.get(
            f"{self.api}/books/download/{book['id']}",
            headers=self.bearer(self.user_token),
        )
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["message"], "Book file does not exist on server.")

    def test_covers_are_served_publicly(self) -> None:
        book = self.create().json()
        resp = self.client.get(book["cover_image_url"])
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.content, PNG_BYTES)

    def test_pdfs_not_reachable_through_static_mount(self) -> None:
        book = self.create(is_premium="true").json()
        pdf = self.stored_pdf(book["id"])
        self.assertTrue(pdf.is_file())
        for headers in ({}, self.bearer(self.user_token)):
            resp = self.client.get(f"/uploads/pdfs/{pdf.name}", headers=headers)
            self.assertEqual(resp.status_code, 404)
        listing = self.client.get(f"{self.api}/books").json()
        self.assertNotIn(pdf.name, str(listing))
