"""Settings defaults and field validators."""

import unittest

from pydantic import ValidationError

from insurance_api.core.config import Settings


class TestSettingsDefaults(unittest.TestCase):
    def test_defaults(self) -> None:
        s = Settings(_env_file=None)
        self.assertEqual(s.JWT_ALGORITHM, "HS256")
        self.assertEqual(s.API_PREFIX, "/api")
        self.assertTrue(s.MONGO_URI.startswith("mongodb"))

    def test_is_dev(self) -> None:
        self.assertTrue(Settings(APP_ENV="dev").is_dev)
        self.assertFalse(Settings(APP_ENV="prod").is_dev)


class TestSettingsValidation(unittest.TestCase):
    def test_rejects_non_mongo_uri(self) -> None:
        with self.assertRaises(ValidationError):
            Settings(MONGO_URI="postgresql://localhost/db")

    def test_accepts_srv_uri(self) -> None:
        s = Settings(MONGO_URI=" mongodb+srv://cluster.example.net/insurance ")
        self.assertEqual(s.MONGO_URI, "mongodb+srv://cluster.example.net/insurance")

    def test_rejects_blank_secret(self) -> None:
        with self.assertRaises(ValidationError):
            Settings(JWT_SECRET="   ")

    def test_rejects_out_of_range_values(self) -> None:
        for field, value in (
            ("JWT_EXPIRE_MINUTES", 0),
            ("JWT_EXPIRE_MINUTES", 525601),
            ("PORT", 70000),
            ("BCRYPT_ROUNDS", 3),
            ("MONGO_TIMEOUT_MS", 0),
        ):
            with self.subTest(field=field, value=value):
                with self.assertRaises(ValidationError):
                    Settings(**{field: value})

    def test_rejects_unknown_env(self) -> None:
        with self.assertRaises(ValidationError):
            Settings(APP_ENV="staging")


if __name__ == "__main__":
    unittest.main()
