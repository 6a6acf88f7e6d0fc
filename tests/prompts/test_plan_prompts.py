"""Tests for the plan prompt builder."""

import os
import sys
import unittest
from datetime import date

sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), "..", ".."))

from farmhand.models.plan import PlanProtocol, PlanRequest
from farmhand.services.plan_prompts import build_plan_prompt, format_prompt_date


def make_request(area=1.23456):
    return PlanRequest(
        crop="Cassava",
        farm_area_hectares=area,
        center_latitude=7.123456,
        center_longitude=-1.987654,
        weather_summary="31°C, Partly cloudy, Humidity: 55%, Wind: 12 km/h",
        request_date=date(2026, 3, 5),
    )


class TestBuildPlanPrompt(unittest.TestCase):
    def test_includes_rounded_inputs(self):
        prompt = build_plan_prompt(make_request())
        self.assertIn("Crop: Cassava", prompt)
        self.assertIn("~1.23 hectares", prompt)
        self.assertIn("7.1235°, -1.9877°", prompt)
        self.assertIn("Partly cloudy", prompt)
        self.assertIn("Date: 5 March 2026", prompt)

    def test_json_protocol_carries_schema(self):
        prompt = build_plan_prompt(make_request())
        self.assertIn('"expected_yield_kg"', prompt)
        self.assertIn('"actions"', prompt)
        self.assertIn("ONLY a JSON object", prompt)

    def test_prose_protocol(self):
        prompt = build_plan_prompt(make_request(), PlanProtocol.PROSE)
        self.assertIn("**Soil Preparation**", prompt)
        self.assertNotIn('"expected_yield_kg"', prompt)

    def test_zero_area_passes_through(self):
        self.assertIn("~0.00 hectares", build_plan_prompt(make_request(area=0.0)))

    def test_deterministic_for_fixed_date(self):
        today = date(2026, 10, 18)
        self.assertEqual(build_plan_prompt(make_request(), today=today),
                         build_plan_prompt(make_request(), today=today))
        self.assertIn("18 October 2026", build_plan_prompt(make_request(), today=today))

    def test_format_prompt_date(self):
        self.assertEqual(format_prompt_date(date(2026, 1, 9)), "9 January 2026")


if __name__ == "__main__":
    unittest.main()
