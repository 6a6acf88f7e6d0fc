"""Tests for the plant screen flow controller."""

import asyncio
import json
import os
import sys
import unittest
from types import SimpleNamespace

import httpx

sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), "..", ".."))

from farmhand.core.config import Settings
from farmhand.core.errors import ConfigurationError, PlanNetworkError
from farmhand.flows.planting_flow import PlantingFlow
from farmhand.models.plan import WEATHER_UNAVAILABLE
from farmhand.models.planting_step import PlantingStep
from farmhand.services.weather_service import WeatherService

PLAN_JSON = json.dumps({
    "steps": [
        {"title": "Soil", "phase": "soil", "actions": ["Clear the field", "Plough the field"]},
        {"title": "Planting", "phase": "planting", "actions": ["Sow the seed"]},
    ]
})


# ── Fakes ──────────────────────────────────────────────────────────────

class FakeAIService:
    def __init__(self, reply=PLAN_JSON, error=None, gate=None):
        self.reply = reply
        self.error = error
        self.gate = gate
        self.requests = []

    async def generate_farming_plan(self, request, protocol):
        self.requests.append(request)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.reply


class FakeWeatherService:
    def __init__(self, summary="27°C, Sunny, Humidity: 50%, Wind: 8 km/h"):
        self.summary = summary
        self.calls = []

    async def get_weather_summary(self, lat, lon):
        self.calls.append((lat, lon))
        return self.summary


class FakePlantService:
    def __init__(self):
        self.saved = []

    async def save_planting_plan(self, **kwargs):
        self.saved.append(kwargs)
        return SimpleNamespace(id="plan-1", **kwargs)


def make_flow(ai=None, weather=None, plants=None):
    return PlantingFlow(
        ai_service=ai or FakeAIService(),
        weather_service=weather or FakeWeatherService(),
        plant_service=plants or FakePlantService(),
        settings=Settings(_env_file=None, WALKTHROUGH_ADVANCE_DELAY=0),
    )


def draw_square(flow):
    for lat, lon in [(6.50, 3.30), (6.50, 3.301), (6.501, 3.301), (6.501, 3.30)]:
        flow.add_point(lat, lon)


# ── Tests: boundary and navigation ────────────────────────────────────

class TestBoundary(unittest.TestCase):
    def test_needs_three_points(self):
        flow = make_flow()
        flow.add_point(6.5, 3.3)
        flow.add_point(6.5, 3.31)
        self.assertFalse(flow.proceed_to_crop_selection())
        self.assertEqual(flow.step, PlantingStep.DRAW_FARM)
        self.assertEqual(flow.alert.title, "Draw Your Farm")

        flow.add_point(6.51, 3.31)
        self.assertTrue(flow.proceed_to_crop_selection())
        self.assertEqual(flow.step, PlantingStep.SELECT_CROP)

    def test_undo_and_clear(self):
        flow = make_flow()
        draw_square(flow)
        flow.undo_last_point()
        self.assertEqual(len(flow.boundary), 3)
        flow.clear_boundary()
        self.assertEqual(flow.boundary, [])
        self.assertEqual(flow.farm_area, 0)

    def test_boundary_hint(self):
        flow = make_flow()
        self.assertEqual(flow.boundary_hint(), "Tap on the map to mark your farm boundary")
        flow.add_point(6.5, 3.3)
        self.assertEqual(flow.boundary_hint(), "1 point added (need at least 3)")
        draw_square(flow)
        self.assertIn("Area: ~", flow.boundary_hint())

    def test_unknown_crop(self):
        with self.assertRaises(ValueError):
            make_flow().select_crop("durian")

    def test_step_label_follows_navigation(self):
        flow = make_flow()
        self.assertEqual(flow.step_label, "Draw Farm")
        draw_square(flow)
        flow.proceed_to_crop_selection()
        self.assertEqual(flow.step_label, "Select Crop")
        flow.back()
        self.assertEqual(flow.step_label, "Draw Farm")


# ── Tests: plan generation ────────────────────────────────────────────

class TestGeneratePlan(unittest.IsolatedAsyncioTestCase):
    async def test_successful_generation(self):
        ai = FakeAIService()
        weather = FakeWeatherService()
        flow = make_flow(ai=ai, weather=weather)
        draw_square(flow)
        flow.proceed_to_crop_selection()
        flow.select_crop("maize")

        plan = await flow.generate_plan()
        self.assertEqual(flow.step, PlantingStep.AI_PLAN)
        self.assertFalse(flow.loading)
        self.assertEqual(len(plan.steps), 2)
        self.assertEqual(flow.walkthrough.total_action_count, 3)

        request = ai.requests[0]
        self.assertEqual(request.crop, "Maize")
        self.assertGreater(request.farm_area_hectares, 0)
        self.assertIn("Sunny", request.weather_summary)
        self.assertAlmostEqual(weather.calls[0][0], 6.5005)

    async def test_weather_failure_does_not_block(self):
        ai = FakeAIService()
        flow = make_flow(ai=ai, weather=FakeWeatherService(summary=WEATHER_UNAVAILABLE))
        draw_square(flow)
        flow.select_crop("rice")
        await flow.generate_plan()
        self.assertEqual(ai.requests[0].weather_summary, WEATHER_UNAVAILABLE)
        self.assertIsNone(flow.weather_summary)
        self.assertIsNotNone(flow.plan)

    async def test_unreadable_weather_reply_does_not_block(self):
        ai = FakeAIService()
        weather = WeatherService(
            api_key="weather-key",
            transport=httpx.MockTransport(lambda r: httpx.Response(200, text="<html>maintenance</html>")),
        )
        flow = make_flow(ai=ai, weather=weather)
        draw_square(flow)
        flow.select_crop("maize")
        plan = await flow.generate_plan()
        self.assertIsNotNone(plan)
        self.assertIsNone(flow.alert)
        self.assertEqual(ai.requests[0].weather_summary, WEATHER_UNAVAILABLE)

    async def test_failure_alerts_and_returns_to_crop_selection(self):
        flow = make_flow(ai=FakeAIService(error=PlanNetworkError("timed out")))
        draw_square(flow)
        flow.proceed_to_crop_selection()
        flow.select_crop("maize")
        self.assertIsNone(await flow.generate_plan())
        self.assertEqual(flow.alert.title, "No Connection")
        self.assertFalse(flow.loading)

        flow.acknowledge_alert()
        self.assertEqual(flow.step, PlantingStep.SELECT_CROP)
        self.assertIsNone(flow.alert)

    async def test_missing_key_message(self):
        flow = make_flow(ai=FakeAIService(error=ConfigurationError("Anthropic API key is missing.")))
        draw_square(flow)
        flow.select_crop("maize")
        await flow.generate_plan()
        self.assertEqual(flow.alert.title, "AI Key Missing")

    async def test_regeneration_resets_walkthrough(self):
        flow = make_flow()
        draw_square(flow)
        flow.select_crop("maize")
        await flow.generate_plan()
        flow.walkthrough.complete_and_advance()
        flow.walkthrough.complete_and_advance()
        self.assertEqual(flow.walkthrough.current_index, 2)

        await flow.generate_plan()
        self.assertEqual(flow.walkthrough.completed_action_count, 0)
        self.assertEqual(flow.walkthrough.current_index, 0)

    async def test_result_after_navigating_back_is_discarded(self):
        gate = asyncio.Event()
        flow = make_flow(ai=FakeAIService(gate=gate))
        draw_square(flow)
        flow.proceed_to_crop_selection()
        flow.select_crop("maize")

        pending = asyncio.create_task(flow.generate_plan())
        await asyncio.sleep(0)
        self.assertTrue(flow.loading)
        flow.back()
        gate.set()

        self.assertIsNone(await pending)
        self.assertIsNone(flow.plan)
        self.assertEqual(flow.step, PlantingStep.SELECT_CROP)
        self.assertTrue(flow.walkthrough.is_inert)

    async def test_no_crop_selected(self):
        self.assertIsNone(await make_flow().generate_plan())


# ── Tests: saving ─────────────────────────────────────────────────────

class TestSavePlan(unittest.IsolatedAsyncioTestCase):
    async def test_save_persists_selections_and_resets(self):
        plants = FakePlantService()
        flow = make_flow(plants=plants)
        draw_square(flow)
        flow.proceed_to_crop_selection()
        flow.select_crop("tomato")
        await flow.generate_plan()
        flow.walkthrough.complete_and_advance()
        flow.proceed_to_review()
        self.assertEqual(flow.step, PlantingStep.REVIEW_SAVE)

        document = await flow.save_plan("farmer-1", "Ada")
        saved = plants.saved[0]
        self.assertEqual(document.id, "plan-1")
        self.assertEqual(saved["farmer_id"], "farmer-1")
        self.assertEqual(saved["crop"]["id"], "tomato")
        self.assertEqual(len(saved["boundary"]), 4)
        self.assertEqual(len(saved["plan"].steps), 2)
        self.assertNotIn("completed", saved)

        self.assertEqual(flow.alert.title, "Plan Saved!")
        self.assertEqual(flow.step, PlantingStep.DRAW_FARM)
        self.assertEqual(flow.boundary, [])
        self.assertIsNone(flow.plan)

    async def test_save_without_plan(self):
        with self.assertRaises(ValueError):
            await make_flow().save_plan("farmer-1")


if __name__ == "__main__":
    unittest.main()
