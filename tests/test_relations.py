"""Unit tests for nesting/grouping rules and the layout law."""

import unittest

from mindboard.config import CHILD_STYLE, FREE_STYLE, PARENT_STYLE
from mindboard.layout import category_bounds, child_position, slot_bounds
from mindboard.models import Point
from mindboard.relations import RelationshipEngine
from mindboard.store import EntityStore

from tests.support import assert_invariants


class RelationsTestCase(unittest.TestCase):

    def setUp(self):
        self.store = EntityStore()
        self.engine = RelationshipEngine(self.store)

    def task(self, x=0, y=0):
        return self.store.create_task((x, y))


class TestLayoutLaw(RelationsTestCase):
    """Children always sit at the deterministic slot for their index."""

    def test_child_position_formula(self):
        parent = self.store.tasks[self.task(100, 200)]
        self.assertEqual(child_position(parent, 0), Point(100 + 240 * 0.3, 200 + 50 + 15))
        self.assertEqual(child_position(parent, 3), Point(100 + 240 * 0.3, 200 + 50 + 15 + 180))

    def test_every_child_at_its_slot(self):
        p = self.task(100, 100)
        kids = [self.task(900, 900 + i) for i in range(4)]
        for kid in kids:
            self.engine.add_child_relation(p, kid)
        parent = self.store.tasks[p]
        for i, kid in enumerate(kids):
            pos = self.store.tasks[kid].position
            self.assertAlmostEqual(pos.x, parent.position.x + 0.3 * parent.size.width)
            self.assertAlmostEqual(pos.y, parent.position.y + parent.size.height + 15 + 60 * i)

    def test_category_bounds_empty(self):
        self.assertIsNone(category_bounds([]))

    def test_slot_bounds_ignores_siblings(self):
        p = self.task(100, 100)
        kids = [self.task() for _ in range(5)]
        for kid in kids:
            self.engine.add_child_relation(p, kid)
        parent = self.store.tasks[p]
        first = slot_bounds(parent, 0, self.store.tasks[kids[0]])
        self.assertEqual((first.x, first.y, first.right, first.bottom), (100, 100, 412, 215))
        last = slot_bounds(parent, 4, self.store.tasks[kids[4]])
        self.assertEqual(last.bottom, 100 + 50 + 15 + 240 + 50)


class TestAddChildRelation(RelationsTestCase):

    def test_basic_nesting(self):
        p, c = self.task(100, 400), self.task(100, 100)
        self.assertTrue(self.engine.add_child_relation(p, c))
        self.assertEqual(self.store.tasks[c].parent_id, p)
        self.assertEqual(self.store.tasks[p].children_ids, [c])
        self.assertEqual(self.store.tasks[c].position, child_position(self.store.tasks[p], 0))
        assert_invariants(self, self.store)

    def test_idempotent(self):
        p, c = self.task(100, 400), self.task(100, 100)
        self.engine.add_child_relation(p, c)
        once = self.store.snapshot()
        self.assertFalse(self.engine.add_child_relation(p, c))
        self.assertEqual(self.store.snapshot(), once)

    def test_immediate_reversal_rejected(self):
        a, b = self.task(), self.task()
        self.engine.add_child_relation(b, a)
        before = self.store.snapshot()
        self.assertFalse(self.engine.add_child_relation(a, b))
        self.assertEqual(self.store.snapshot(), before)

    def test_longer_cycle_rejected(self):
        """A -> B -> C; making A a child of C would close a loop."""
        a, b, c = self.task(), self.task(), self.task()
        self.engine.add_child_relation(a, b)
        self.engine.add_child_relation(b, c)
        self.assertFalse(self.engine.add_child_relation(c, a))
        self.assertIsNone(self.store.tasks[a].parent_id)
        assert_invariants(self, self.store)

    def test_self_parenting_rejected(self):
        a = self.task()
        self.assertFalse(self.engine.add_child_relation(a, a))

    def test_reparenting_closes_gap_in_old_parent(self):
        old, new = self.task(0, 0), self.task(600, 0)
        first, second = self.task(), self.task()
        self.engine.add_child_relation(old, first)
        self.engine.add_child_relation(old, second)
        self.engine.add_child_relation(new, first)
        self.assertEqual(self.store.tasks[old].children_ids, [second])
        self.assertEqual(self.store.tasks[second].position, child_position(self.store.tasks[old], 0))
        self.assertEqual(self.store.tasks[new].children_ids, [first])
        assert_invariants(self, self.store)

    def test_leaving_category_dissolves_it(self):
        p = self.task(0, 600)
        a, b = self.task(0, 0), self.task(300, 0)
        cid = self.store.create_category([a, b])
        self.engine.add_child_relation(p, a)
        self.assertNotIn(cid, self.store.categories)
        self.assertIsNone(self.store.tasks[a].category_id)
        self.assertIsNone(self.store.tasks[b].category_id)
        assert_invariants(self, self.store)

    def test_subtree_follows_new_parent(self):
        p, a, x = self.task(500, 500), self.task(0, 0), self.task()
        self.engine.add_child_relation(a, x)
        self.engine.add_child_relation(p, a)
        self.assertEqual(self.store.tasks[x].position, child_position(self.store.tasks[a], 0))
        assert_invariants(self, self.store)

    def test_styles_follow_state(self):
        p, c = self.task(), self.task()
        self.engine.add_child_relation(p, c)
        self.assertEqual(self.store.tasks[p].style, PARENT_STYLE)
        self.assertEqual(self.store.tasks[c].style, CHILD_STYLE)
        self.engine.remove_task_from_parent(c)
        self.assertEqual(self.store.tasks[p].style, FREE_STYLE)
        self.assertEqual(self.store.tasks[c].style, FREE_STYLE)

    def test_unknown_ids(self):
        a = self.task()
        self.assertFalse(self.engine.add_child_relation("ghost", a))
        self.assertFalse(self.engine.add_child_relation(a, "ghost"))
        self.assertEqual(self.store.tasks[a].children_ids, [])


class TestDetach(RelationsTestCase):

    def test_remove_from_parent_keeps_position(self):
        p = self.task(100, 100)
        kids = [self.task() for _ in range(3)]
        for kid in kids:
            self.engine.add_child_relation(p, kid)
        where = self.store.tasks[kids[0]].position
        self.assertTrue(self.engine.remove_task_from_parent(kids[0]))
        self.assertEqual(self.store.tasks[kids[0]].position, where)
        self.assertIsNone(self.store.tasks[kids[0]].parent_id)
        self.assertEqual(self.store.tasks[kids[1]].position, child_position(self.store.tasks[p], 0))
        assert_invariants(self, self.store)

    def test_remove_from_parent_when_free(self):
        self.assertFalse(self.engine.remove_task_from_parent(self.task()))
        self.assertFalse(self.engine.remove_task_from_parent("ghost"))

    def test_remove_from_category_dissolves_pair(self):
        a, b = self.task(0, 0), self.task(300, 0)
        cid = self.store.create_category([a, b])
        self.assertTrue(self.engine.remove_task_from_category(a))
        self.assertNotIn(cid, self.store.categories)
        self.assertIsNone(self.store.tasks[b].category_id)

    def test_remove_from_larger_category_keeps_it(self):
        a, b, c = self.task(0, 0), self.task(300, 0), self.task(600, 0)
        cid = self.store.create_category([a, b, c])
        before = self.store.tasks[b].position
        self.engine.remove_task_from_category(a)
        self.assertEqual(self.store.categories[cid].task_ids, [b, c])
        self.assertEqual(self.store.tasks[b].position, before)
        assert_invariants(self, self.store)


class TestAddTaskToCategory(RelationsTestCase):

    def setUp(self):
        super().setUp()
        self.a, self.b = self.task(0, 0), self.task(300, 0)
        self.cid = self.store.create_category([self.a, self.b])

    def test_join_from_free(self):
        c = self.task(900, 900)
        self.assertTrue(self.engine.add_task_to_category(c, self.cid))
        self.assertEqual(self.store.categories[self.cid].task_ids, [self.a, self.b, c])
        self.assertEqual(self.store.tasks[c].category_id, self.cid)

    def test_join_clears_parent(self):
        p, c = self.task(900, 0), self.task()
        self.engine.add_child_relation(p, c)
        self.engine.add_task_to_category(c, self.cid)
        self.assertIsNone(self.store.tasks[c].parent_id)
        self.assertEqual(self.store.tasks[p].children_ids, [])
        assert_invariants(self, self.store)

    def test_switching_categories_dissolves_old_pair(self):
        c, d = self.task(0, 500), self.task(300, 500)
        other = self.store.create_category([c, d])
        self.engine.add_task_to_category(c, self.cid)
        self.assertNotIn(other, self.store.categories)
        self.assertIsNone(self.store.tasks[d].category_id)
        self.assertIn(c, self.store.categories[self.cid].task_ids)
        assert_invariants(self, self.store)

    def test_already_member_is_no_op(self):
        self.assertFalse(self.engine.add_task_to_category(self.a, self.cid))
        self.assertEqual(self.store.categories[self.cid].task_ids, [self.a, self.b])

    def test_unknown_category(self):
        c = self.task()
        self.assertFalse(self.engine.add_task_to_category(c, "ghost"))
        self.assertIsNone(self.store.tasks[c].category_id)


if __name__ == "__main__":
    unittest.main()
