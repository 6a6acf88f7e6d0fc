"""Tests for user-facing plan error messages."""

import os
import sys
import unittest

sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), "..", ".."))

from farmhand.core.errors import (
    ConfigurationError,
    ModelUnavailableError,
    PlanAPIError,
    PlanNetworkError,
    describe_plan_error,
)


class TestDescribePlanError(unittest.TestCase):
    def test_titles_distinguish_causes(self):
        cases = [
            (ConfigurationError("key missing"), "AI Key Missing"),
            (PlanNetworkError("timed out"), "No Connection"),
            (ModelUnavailableError("claude-x", "model: claude-x"), "AI Model Unavailable"),
            (PlanAPIError(429, "A", "Rate limited"), "AI Quota Exceeded"),
            (PlanAPIError(400, "A", "Your credit balance is too low"), "AI Quota Exceeded"),
            (PlanAPIError(401, "A", "invalid x-api-key"), "AI Key Rejected"),
            (PlanAPIError(500, "A", "Overloaded"), "Plan Generation Failed"),
        ]
        for error, title in cases:
            with self.subTest(error=error):
                self.assertEqual(describe_plan_error(error)[0], title)

    def test_message_keeps_details(self):
        _, message = describe_plan_error(PlanAPIError(500, "claude-x", "Overloaded"))
        self.assertIn("HTTP 500", message)
        self.assertIn("claude-x", message)
        self.assertIn("Overloaded", message)

    def test_unknown_error(self):
        self.assertEqual(describe_plan_error(None)[0], "Plan Generation Failed")
        self.assertIn("Verify", describe_plan_error(None)[1])


if __name__ == "__main__":
    unittest.main()
