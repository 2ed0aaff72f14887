"""Unit tests for drop-zone classification."""

import unittest

from mindboard.dropzone import DropAction, DropZone, detect_category_drop, detect_drop_zone, resolve_drop
from mindboard.models import Category, Point, Size, Task


def make_task(tid, x, y, **kwargs):
    return Task(id=tid, position=Point(x, y), size=Size(240, 50), **kwargs)


class TestChildZone(unittest.TestCase):
    """Target at (100, 400): child zone is y in (450, 530], x in [52, 388]."""

    def setUp(self):
        self.dragged = make_task("a", 100, 100)
        self.target = make_task("b", 100, 400)

    def test_inside_zone(self):
        zone = detect_drop_zone(self.dragged, self.target, (220, 480))
        self.assertEqual(zone, DropZone(DropAction.ADD_CHILD, "b"))

    def test_vertical_edges(self):
        self.assertTrue(detect_drop_zone(self.dragged, self.target, (220, 450)).is_move)
        self.assertEqual(detect_drop_zone(self.dragged, self.target, (220, 530)).action, DropAction.ADD_CHILD)
        self.assertTrue(detect_drop_zone(self.dragged, self.target, (220, 531)).is_move)

    def test_horizontal_edges(self):
        self.assertEqual(detect_drop_zone(self.dragged, self.target, (52, 480)).action, DropAction.ADD_CHILD)
        self.assertEqual(detect_drop_zone(self.dragged, self.target, (388, 480)).action, DropAction.ADD_CHILD)
        self.assertTrue(detect_drop_zone(self.dragged, self.target, (51, 480)).is_move)
        self.assertTrue(detect_drop_zone(self.dragged, self.target, (389, 480)).is_move)

    def test_pointer_shapes(self):
        self.assertEqual(detect_drop_zone(self.dragged, self.target, {"x": 220, "y": 480}).action, DropAction.ADD_CHILD)
        self.assertEqual(detect_drop_zone(self.dragged, self.target, Point(220, 480)).action, DropAction.ADD_CHILD)
        self.assertTrue(detect_drop_zone(self.dragged, self.target, "xy").is_move)

    def test_pointer_on_target_body_is_move(self):
        self.assertTrue(detect_drop_zone(self.dragged, self.target, (220, 420)).is_move)

    def test_dragged_with_parent_is_move(self):
        self.dragged.parent_id = "someone"
        self.assertTrue(detect_drop_zone(self.dragged, self.target, (220, 480)).is_move)

    def test_reversal_is_move(self):
        self.target.parent_id = "a"
        self.assertTrue(detect_drop_zone(self.dragged, self.target, (220, 480)).is_move)

    def test_self_is_move(self):
        self.assertTrue(detect_drop_zone(self.target, self.target, (220, 480)).is_move)


class TestCategoryZone(unittest.TestCase):
    """Just above a target: 20 < distance < 80, within one width of its centre."""

    def setUp(self):
        self.dragged = make_task("a", 100, 100)
        self.target = make_task("b", 100, 400)

    def test_above(self):
        zone = detect_drop_zone(self.dragged, self.target, (220, 360))
        self.assertEqual(zone, DropZone(DropAction.CREATE_CATEGORY, "b"))

    def test_distance_is_exclusive(self):
        self.assertTrue(detect_drop_zone(self.dragged, self.target, (220, 380)).is_move)
        self.assertTrue(detect_drop_zone(self.dragged, self.target, (220, 320)).is_move)
        self.assertEqual(detect_drop_zone(self.dragged, self.target, (220, 379)).action, DropAction.CREATE_CATEGORY)

    def test_horizontal_reach(self):
        self.assertEqual(detect_drop_zone(self.dragged, self.target, (459, 360)).action, DropAction.CREATE_CATEGORY)
        self.assertTrue(detect_drop_zone(self.dragged, self.target, (460, 360)).is_move)
        self.assertTrue(detect_drop_zone(self.dragged, self.target, (-20, 360)).is_move)


class TestIncompleteGeometry(unittest.TestCase):

    def test_zero_size_target(self):
        target = Task(id="b", position=Point(100, 400), size=Size(0, 50))
        self.assertTrue(detect_drop_zone(make_task("a", 0, 0), target, (100, 460)).is_move)

    def test_missing_position(self):
        target = make_task("b", 100, 400)
        target.position = None
        self.assertTrue(detect_drop_zone(make_task("a", 0, 0), target, (220, 480)).is_move)

    def test_missing_inputs(self):
        target = make_task("b", 100, 400)
        self.assertTrue(detect_drop_zone(None, target, (220, 480)).is_move)
        self.assertTrue(detect_drop_zone(make_task("a", 0, 0), None, (220, 480)).is_move)
        self.assertTrue(detect_drop_zone(make_task("a", 0, 0), target, None).is_move)

    def test_zero_size_category(self):
        category = Category(id="c", position=Point(0, 0), size=Size(0, 0))
        self.assertTrue(detect_category_drop(make_task("a", 0, 0), category, (0, 0)).is_move)


class TestCategoryDrop(unittest.TestCase):

    def setUp(self):
        self.category = Category(id="c", task_ids=["x", "y"], position=Point(0, 0), size=Size(300, 200))

    def test_inside_is_inclusive(self):
        dragged = make_task("a", 900, 900)
        self.assertEqual(detect_category_drop(dragged, self.category, (0, 0)).action, DropAction.ADD_TO_CATEGORY)
        self.assertEqual(detect_category_drop(dragged, self.category, (300, 200)).target_id, "c")
        self.assertTrue(detect_category_drop(dragged, self.category, (301, 100)).is_move)

    def test_member_is_move(self):
        dragged = make_task("x", 10, 10, category_id="c")
        self.assertTrue(detect_category_drop(dragged, self.category, (50, 50)).is_move)


class TestResolution(unittest.TestCase):

    def test_categories_checked_before_tasks(self):
        dragged = make_task("a", 0, 0)
        target = make_task("b", 100, 400)
        category = Category(id="c", task_ids=["x", "y"], position=Point(0, 300), size=Size(600, 400))
        zone = resolve_drop(dragged, [dragged, target], [category], (220, 480))
        self.assertEqual(zone, DropZone(DropAction.ADD_TO_CATEGORY, "c"))

    def test_first_task_in_order_wins(self):
        dragged = make_task("a", 0, 0)
        first = make_task("b", 100, 400)
        second = make_task("c", 110, 400)
        zone = resolve_drop(dragged, [dragged, first, second], [], (220, 480))
        self.assertEqual(zone.target_id, "b")
        zone = resolve_drop(dragged, [dragged, second, first], [], (220, 480))
        self.assertEqual(zone.target_id, "c")

    def test_nested_tasks_are_not_targets(self):
        dragged = make_task("a", 0, 0)
        nested = make_task("b", 100, 400, parent_id="p")
        self.assertTrue(resolve_drop(dragged, [dragged, nested], [], (220, 480)).is_move)

    def test_nothing_qualifies(self):
        dragged = make_task("a", 0, 0)
        self.assertEqual(resolve_drop(dragged, [dragged], [], (5000, 5000)), DropZone())


if __name__ == "__main__":
    unittest.main()
