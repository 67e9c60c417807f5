import random
import unittest

from config import HIRE_COST, HIRE_QUEUE_THRESHOLD, NARRATION_CATEGORIES, NARRATION_LIMIT, POLICY_INTERVAL, STARTING_FUNDS
from cafe import CafeSim
from cafe.entities import CustomerState
from cafe.narrator import HeuristicPolicy, NarrationLog, clean_narration_text


def _fill_line(sim: CafeSim, count: int) -> None:
    sim.spawn_timer = -1.0e9
    for _ in range(count):
        customer = sim._spawn_customer()
        customer.state = CustomerState.QUEUING
        sim.line.append(customer.id)


class NarrationLogTests(unittest.TestCase):
    def test_newest_first_and_bounded(self):
        log = NarrationLog()
        for i in range(NARRATION_LIMIT + 5):
            log.add(f"entry {i}", "observation", float(i))

        self.assertEqual(len(log), NARRATION_LIMIT)
        self.assertEqual(log.entries[0].text, f"entry {NARRATION_LIMIT + 4}")
        self.assertEqual(log.entries[-1].text, "entry 5")
        ids = [e.id for e in log.entries]
        self.assertEqual(ids, sorted(ids, reverse=True))

    def test_unknown_category_falls_back_to_observation(self):
        log = NarrationLog()
        entry = log.add("hello", "gossip", 0.0)
        self.assertEqual(entry.category, "observation")

    def test_view_reports_age(self):
        log = NarrationLog()
        log.add("first", "strategy", 2.0)
        view = log.view(5.5)
        self.assertEqual(view, [{"id": 1, "text": "first", "type": "strategy", "age": 3.5}])


class CleanTextTests(unittest.TestCase):
    def test_strips_labels_and_whitespace(self):
        self.assertEqual(clean_narration_text("[observation]  The line   is long "), "The line is long")
        self.assertEqual(clean_narration_text("Thought: keep going"), "keep going")
        self.assertEqual(clean_narration_text("## Reflection: slow day"), "slow day")
        self.assertEqual(clean_narration_text("[misc] tag"), "tag")

    def test_empty_and_long_text(self):
        self.assertEqual(clean_narration_text(""), "")
        self.assertEqual(len(clean_narration_text("x" * 2000)), 500)


class HeuristicPolicyTests(unittest.TestCase):
    def test_hires_when_line_is_long_and_funds_allow(self):
        sim = CafeSim(seed=8)
        _fill_line(sim, HIRE_QUEUE_THRESHOLD)

        sim.policy.run(sim)

        self.assertEqual(sim.staff_count, 2)
        self.assertEqual(sim.ledger.funds, STARTING_FUNDS - HIRE_COST)
        self.assertIn("decision", [e.category for e in sim.narration.entries])

    def test_hire_narration_names_the_new_barista(self):
        sim = CafeSim(seed=8)
        sim.ledger.funds = 1000.0
        sim.hire_barista()
        sim.hire_barista()
        self.assertTrue(sim.fire_barista())
        _fill_line(sim, HIRE_QUEUE_THRESHOLD)

        sim.policy.run(sim)

        self.assertIn(4, sim.staff)
        hires = [e.text for e in sim.narration.entries if "hired barista" in e.text]
        self.assertEqual(len(hires), 1)
        self.assertIn("barista #4", hires[0])

    def test_repeat_run_without_funds_does_not_hire(self):
        sim = CafeSim(seed=8)
        _fill_line(sim, HIRE_QUEUE_THRESHOLD)
        sim.policy.run(sim)
        funds = sim.ledger.funds

        sim.policy.run(sim)

        self.assertLess(funds, HIRE_COST)
        self.assertEqual(sim.staff_count, 2)
        self.assertEqual(sim.ledger.funds, funds)

    def test_short_line_never_hires(self):
        sim = CafeSim(seed=8)
        _fill_line(sim, HIRE_QUEUE_THRESHOLD - 1)
        sim.policy.run(sim)
        self.assertEqual(sim.staff_count, 1)
        self.assertEqual(sim.ledger.funds, STARTING_FUNDS)

    def test_every_run_writes_one_narration(self):
        sim = CafeSim(seed=8)
        for expected in range(1, 6):
            sim.policy.run(sim)
            self.assertEqual(len(sim.narration), expected)
            self.assertIn(sim.narration.entries[0].category, NARRATION_CATEGORIES)
            self.assertTrue(sim.narration.entries[0].text)

    def test_runs_on_its_own_cadence(self):
        sim = CafeSim(seed=8)
        policy = HeuristicPolicy(random.Random(1))
        self.assertFalse(policy.tick(sim, POLICY_INTERVAL / 2))
        self.assertEqual(len(sim.narration), 0)
        self.assertTrue(policy.tick(sim, POLICY_INTERVAL / 2))
        self.assertEqual(len(sim.narration), 1)

    def test_tick_cadence_hires_from_the_sim_loop(self):
        sim = CafeSim(seed=8)
        _fill_line(sim, HIRE_QUEUE_THRESHOLD)
        sim.policy.timer = POLICY_INTERVAL - 0.05
        sim.tick(0.1)
        self.assertEqual(sim.staff_count, 2)


def test_templates_all_render_on_a_fresh_sim():
    sim = CafeSim(seed=2)
    policy = sim.policy
    for category, render in policy._templates.values():
        assert category in NARRATION_CATEGORIES
        assert isinstance(render(sim), str)


def test_templates_render_after_trading():
    sim = CafeSim(seed=2)
    sim.ledger.record_sale(4.5, "coffee", 3.0)
    sim.ledger.record_sale(5.5, "cake", 3.0)
    sim.ledger.record_walkout()
    sim.ledger.rollover()
    sim.ledger.record_sale(4.5, "coffee", 30.0)
    sim.policy.last_rating = 5.0

    rendered = [render(sim) for _, render in sim.policy._templates.values()]

    assert any("walked out" in text for text in rendered)
    assert any("Coffee to cake" in text for text in rendered)
    assert any("yesterday" in text for text in rendered)
