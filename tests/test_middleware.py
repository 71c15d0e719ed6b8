"""Unit and HTTP tests for tracky.core.middleware: public allow-list and identity resolution."""

import os
import tempfile
import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient
from starlette.concurrency import run_in_threadpool

from tracky.application import public_paths
from tracky.core.identity import SESSION_COOKIE_NAME
from tracky.core.middleware import is_public_path

from support import make_app, make_settings, signup_and_login

API = "/api/v1"


class TestIsPublicPath(unittest.TestCase):
    def setUp(self) -> None:
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.exact, self.prefixes = public_paths(make_settings(tmp.name))

    def public(self, path: str) -> bool:
        return is_public_path(path, self.exact, self.prefixes)

    def test_exact_matches(self) -> None:
        for path in ("/", f"{API}/signup", f"{API}/login", f"{API}/health", "/openapi.json"):
            with self.subTest(path=path):
                self.assertTrue(self.public(path))

    def test_asset_directory_prefix(self) -> None:
        for path in ("/static/app.js", "/static/css/site.css", "/static/"):
            with self.subTest(path=path):
                self.assertTrue(self.public(path))

    def test_prefix_needs_directory_boundary(self) -> None:
        for path in ("/static", "/staticx", "/staticfiles/app.js"):
            with self.subTest(path=path):
                self.assertFalse(self.public(path))

    def test_exact_entries_do_not_cover_subpaths(self) -> None:
        for path in (f"{API}/login/x", f"{API}/signup/", "/docsx", f"{API}/me", f"{API}/notebooks"):
            with self.subTest(path=path):
                self.assertFalse(self.public(path))


class TestStaticAssets(unittest.TestCase):
    def setUp(self) -> None:
        patcher = patch("tracky.core.security.BCRYPT_ROUNDS", 4)
        patcher.start()
        self.addCleanup(patcher.stop)
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        static_dir = os.path.join(tmp.name, "static")
        os.makedirs(static_dir)
        with open(os.path.join(static_dir, "app.js"), "w") as f:
            f.write("console.log('tracky');")
        with open(os.path.join(static_dir, "index.html"), "w") as f:
            f.write("<html>tracky</html>")
        self.app = make_app(tmp.name)

    def test_assets_served_without_cookie(self) -> None:
        resp = TestClient(self.app).get("/static/app.js")
        self.assertEqual(resp.status_code, 200)
        self.assertIn("tracky", resp.text)

    def test_index_served_at_root(self) -> None:
        resp = TestClient(self.app).get("/")
        self.assertEqual(resp.status_code, 200)
        self.assertIn("<html>", resp.text)


class TestIdentityResolution(unittest.TestCase):
    def setUp(self) -> None:
        patcher = patch("tracky.core.security.BCRYPT_ROUNDS", 4)
        patcher.start()
        self.addCleanup(patcher.stop)
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.app = make_app(tmp.name, AUTH_STRATEGY="session")

    def test_resolves_off_the_event_loop(self) -> None:
        client = signup_and_login(self.app, "alice")
        token = client.cookies[SESSION_COOKIE_NAME]
        with patch("tracky.core.middleware.run_in_threadpool", wraps=run_in_threadpool) as spy:
            self.assertEqual(client.get(f"{API}/me").status_code, 200)
        spy.assert_called_once_with(self.app.state.verifier.resolve, token)

    def test_public_paths_skip_resolution(self) -> None:
        with patch("tracky.core.middleware.run_in_threadpool", wraps=run_in_threadpool) as spy:
            self.assertEqual(TestClient(self.app).get(f"{API}/health").status_code, 200)
        spy.assert_not_called()


if __name__ == "__main__":
    unittest.main()
