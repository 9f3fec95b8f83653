import json
import unittest

import httpx

from project_pulse.domain.exceptions import LlmError
from project_pulse.infrastructure.github_rest_adapter import GitHubRestClient
from project_pulse.services.aggregate_repo import AggregateRepoUseCase
from project_pulse.services.pulse_summary import (
    PulseSummarizer,
    build_digest,
    parse_summary,
)

from fakes import NOW, SUMMARY_JSON, FakeLlm, healthy_repo


class TestParseSummary(unittest.TestCase):
    def test_parses_fenced_json(self):
        summary = parse_summary(f"```json\n{SUMMARY_JSON}\n```")
        self.assertEqual(summary.overview, "Active project with one stale PR branch.")
        self.assertEqual(summary.blockers, ("feature-a has been idle for 3 days",))
        self.assertEqual(summary.recommendations, ("Review PR #1",))

    def test_missing_lists_become_empty(self):
        summary = parse_summary('{"overview": "ok"}')
        self.assertEqual((summary.activity, summary.blockers, summary.recommendations), ("", (), ()))

    def test_invalid_json(self):
        with self.assertRaises(LlmError):
            parse_summary("definitely not json")

    def test_missing_overview(self):
        with self.assertRaises(LlmError):
            parse_summary('{"activity": "x"}')

    def test_non_object(self):
        with self.assertRaises(LlmError):
            parse_summary("[1, 2]")


class SummarizerTestCase(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        http = httpx.AsyncClient(transport=healthy_repo().transport())
        try:
            use_case = AggregateRepoUseCase(GitHubRestClient(http), clock=lambda: NOW)
            self.result = await use_case.aggregate("acme/widget")
        finally:
            await http.aclose()


class TestDigest(SummarizerTestCase):
    async def test_digest_is_json_serialisable_and_flags_stale_branches(self):
        digest = build_digest(self.result)
        json.dumps(digest)
        self.assertEqual(digest["counts"]["staleBranches"], 1)
        self.assertEqual(digest["staleBranches"], [{"name": "feature-a", "daysSinceLastCommit": 3}])
        self.assertEqual(
            [c["login"] for c in digest["activeContributors"]], ["alice", "bob"]
        )


class TestSummarizer(SummarizerTestCase):
    async def test_summary_success(self):
        llm = FakeLlm()
        summary, error = await PulseSummarizer(llm).summarize(self.result)
        self.assertIsNone(error)
        self.assertEqual(summary.recommendations, ("Review PR #1",))
        self.assertIn("acme/widget", llm.calls[0][1])

    async def test_llm_failure_is_reported_not_raised(self):
        summary, error = await PulseSummarizer(FakeLlm(error=LlmError("quota"))).summarize(self.result)
        self.assertIsNone(summary)
        self.assertEqual(error, "quota")

    async def test_malformed_reply_is_reported(self):
        summary, error = await PulseSummarizer(FakeLlm(reply="nope")).summarize(self.result)
        self.assertIsNone(summary)
        self.assertIn("invalid JSON", error)

    async def test_no_gateway_configured(self):
        summary, error = await PulseSummarizer(None).summarize(self.result)
        self.assertIsNone(summary)
        self.assertIn("no LLM provider", error)

    async def test_chat_passes_conversation_and_digest(self):
        llm = FakeLlm(reply="Two PRs are open.")
        reply = await PulseSummarizer(llm).chat(self.result, [("user", "How many PRs?")])
        self.assertEqual(reply, "Two PRs are open.")
        system, messages = llm.calls[0]
        self.assertIn("acme/widget", system)
        self.assertEqual(messages, [("user", "How many PRs?")])

    async def test_chat_without_gateway_raises(self):
        with self.assertRaises(LlmError):
            await PulseSummarizer(None).chat(self.result, [("user", "hi")])


if __name__ == '__main__':
    unittest.main()
