import unittest
from datetime import datetime, timezone

from project_pulse.domain.entities import Assignee, Label
from project_pulse.services.raw_mappers import (
    UNKNOWN_AUTHOR,
    commit_author,
    commit_timestamp,
    days_between,
    first_line,
    is_pull_request,
    map_branch,
    map_commit,
    map_contributor,
    map_issue,
    map_metadata,
    map_pull_request,
    parse_timestamp,
)

from fakes import NOW, raw_branch, raw_commit, raw_issue, raw_pull, raw_repo


class TestFallbacks(unittest.TestCase):
    def test_commit_author_prefers_linked_login(self):
        self.assertEqual(commit_author(raw_commit("x", login="alice", name="Alice A.")), "alice")

    def test_commit_author_falls_back_to_git_name(self):
        self.assertEqual(commit_author(raw_commit("x", login=None, name="Alice A.")), "Alice A.")

    def test_commit_author_falls_back_to_unknown(self):
        self.assertEqual(commit_author({"sha": "x", "author": None, "commit": {}}), UNKNOWN_AUTHOR)
        self.assertEqual(commit_author({"sha": "x"}), UNKNOWN_AUTHOR)

    def test_commit_timestamp_falls_back_to_committer(self):
        raw = {"commit": {"author": {"name": "a"}, "committer": {"date": "2024-06-01T00:00:00Z"}}}
        self.assertEqual(commit_timestamp(raw), datetime(2024, 6, 1, tzinfo=timezone.utc))
        self.assertIsNone(commit_timestamp({"commit": {}}))

    def test_first_line(self):
        self.assertEqual(first_line("Subject\n\nBody"), "Subject")
        self.assertEqual(first_line(None), "")

    def test_parse_timestamp(self):
        self.assertEqual(
            parse_timestamp("2024-06-09T10:00:00Z"),
            datetime(2024, 6, 9, 10, 0, tzinfo=timezone.utc),
        )
        self.assertIsNone(parse_timestamp(None))
        self.assertIsNone(parse_timestamp("not a date"))
        self.assertEqual(parse_timestamp("2024-06-09T10:00:00").tzinfo, timezone.utc)

    def test_days_between_floors_whole_days(self):
        self.assertEqual(days_between(datetime(2024, 6, 8, 12, 1, tzinfo=timezone.utc), NOW), 1)
        self.assertEqual(days_between(datetime(2024, 6, 8, 12, 0, tzinfo=timezone.utc), NOW), 2)
        self.assertIsNone(days_between(None, NOW))

    def test_is_pull_request(self):
        self.assertTrue(is_pull_request(raw_issue(1, pull_request=True)))
        self.assertFalse(is_pull_request(raw_issue(1)))


class TestRecordMappers(unittest.TestCase):
    def test_map_metadata(self):
        meta = map_metadata(raw_repo(default_branch="trunk"))
        self.assertEqual(meta.full_name, "acme/widget")
        self.assertEqual(meta.default_branch, "trunk")
        self.assertEqual(meta.owner, "acme")
        self.assertEqual(meta.stars, 42)
        self.assertEqual(meta.pushed_at, datetime(2024, 6, 9, 10, 0, tzinfo=timezone.utc))

    def test_map_commit(self):
        commit = map_commit(raw_commit("abc", login=None, name="Ghost"), "main")
        self.assertEqual(commit.sha, "abc")
        self.assertEqual(commit.author, "Ghost")
        self.assertIsNone(commit.author_avatar_url)
        self.assertEqual(commit.message, "Fix the thing")
        self.assertEqual(commit.branch, "main")

    def test_map_branch_with_tip(self):
        branch = map_branch(raw_branch("dev", "d1"), raw_commit("d1", "2024-06-05T12:00:00Z"), NOW)
        self.assertEqual(branch.name, "dev")
        self.assertEqual(branch.last_commit_author, "alice")
        self.assertEqual(branch.days_since_last_commit, 5)
        self.assertFalse(branch.is_stale)

    def test_map_branch_without_tip_has_null_detail(self):
        branch = map_branch(raw_branch("dev", "d1"), None, NOW)
        self.assertIsNone(branch.last_commit_at)
        self.assertIsNone(branch.last_commit_author)
        self.assertIsNone(branch.days_since_last_commit)

    def test_map_pull_request(self):
        pr = map_pull_request(raw_pull(7, "feature", base="develop"))
        self.assertEqual((pr.number, pr.head_branch, pr.base_branch), (7, "feature", "develop"))
        self.assertEqual(pr.author, "bob")
        self.assertIsNone(pr.merged_at)
        self.assertFalse(pr.is_draft)

    def test_map_pull_request_without_user(self):
        raw = raw_pull(8, "x")
        raw["user"] = None
        self.assertEqual(map_pull_request(raw).author, UNKNOWN_AUTHOR)

    def test_map_issue_keeps_label_and_assignee_order(self):
        issue = map_issue(raw_issue(3))
        self.assertEqual(
            issue.labels, (Label("bug", "d73a4a"), Label("help wanted", "008672"))
        )
        self.assertEqual(issue.assignees, (Assignee("alice", "https://avatars/alice"),))
        self.assertEqual(issue.author, "carol")

    def test_map_contributor(self):
        contributor = map_contributor({"login": "alice", "avatar_url": "a", "contributions": 9})
        self.assertEqual(contributor.total_commits, 9)
        self.assertEqual(dict(contributor.commits_by_day), {})


if __name__ == '__main__':
    unittest.main()
