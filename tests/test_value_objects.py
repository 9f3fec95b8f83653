import unittest

from project_pulse.domain.exceptions import InvalidReferenceError
from project_pulse.domain.value_objects import RepositoryIdentity


class TestRepositoryIdentity(unittest.TestCase):
    def test_equivalent_references_parse_to_same_identity(self):
        references = [
            "https://github.com/psf/requests",
            "https://github.com/psf/requests.git",
            "https://github.com/psf/requests/",
            "http://www.github.com/psf/requests",
            "github.com/psf/requests",
            "psf/requests",
            "psf/requests.git",
            "  psf/requests  ",
        ]
        for ref in references:
            with self.subTest(ref=ref):
                identity = RepositoryIdentity.parse(ref)
                self.assertEqual(identity, RepositoryIdentity(owner="psf", name="requests"))

    def test_other_hosts_are_accepted(self):
        identity = RepositoryIdentity.parse("https://gitlab.example.org/team/tool.git")
        self.assertEqual((identity.owner, identity.name), ("team", "tool"))

    def test_malformed_references_fail(self):
        references = [
            "",
            "   ",
            "requests",
            "psf/",
            "/requests",
            "psf/requests/extra",
            "https://github.com/psf",
            "https://github.com/psf/requests/tree/main",
            "psf/.git",
            "psf requests/x",
        ]
        for ref in references:
            with self.subTest(ref=ref):
                with self.assertRaises(InvalidReferenceError):
                    RepositoryIdentity.parse(ref)

    def test_names_and_key(self):
        identity = RepositoryIdentity.parse("Octo-Org/My.Repo")
        self.assertEqual(identity.full_name, "Octo-Org/My.Repo")
        self.assertEqual(identity.key, "octo-org/my.repo")

    def test_identity_is_immutable(self):
        identity = RepositoryIdentity.parse("psf/requests")
        with self.assertRaises(AttributeError):
            identity.owner = "other"  # type: ignore[misc]


if __name__ == '__main__':
    unittest.main()
