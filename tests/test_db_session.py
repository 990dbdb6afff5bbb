import os
import unittest
from unittest.mock import patch

from sqlmodel import Session

from subscribe_for_data.db import SQLStreamSource, create_session, database_url, get_engine, reset_engine


class TestDBSession(unittest.TestCase):
    def tearDown(self):
        reset_engine()

    def test_database_url_from_env(self):
        with patch.dict(os.environ, {"SFD_DATABASE_URL": "sqlite:///tmp/sfd.db"}):
            self.assertEqual(database_url(), "sqlite:///tmp/sfd.db")

    def test_engine_is_cached_until_reset(self):
        with patch.dict(os.environ, {"SFD_DATABASE_URL": "sqlite://"}):
            reset_engine()
            first = get_engine()
            self.assertIs(get_engine(), first)
            reset_engine()
            self.assertIsNot(get_engine(), first)

    def test_create_session(self):
        with patch.dict(os.environ, {"SFD_DATABASE_URL": "sqlite://"}):
            reset_engine()
            with create_session() as session:
                self.assertIsInstance(session, Session)

    def test_stream_source_defaults(self):
        with patch.dict(os.environ, {"SFD_SQL_BATCH_SIZE": "25"}):
            source = SQLStreamSource()
        self.assertIs(source.session_factory, create_session)
        self.assertEqual(source.batch_size, 25)


if __name__ == "__main__":
    unittest.main()
