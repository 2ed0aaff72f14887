"""Shared assertions for board invariants."""
from mindboard.layout import child_position


def assert_invariants(case, store):
    for task in store.tasks.values():
        case.assertFalse(
            task.parent_id is not None and task.category_id is not None,
            f"{task.id} is both nested and grouped",
        )
        if task.parent_id is not None:
            parent = store.tasks[task.parent_id]
            case.assertIn(task.id, parent.children_ids)
        for index, cid in enumerate(task.children_ids):
            child = store.tasks[cid]
            case.assertEqual(child.parent_id, task.id)
            expected = child_position(task, index)
            case.assertAlmostEqual(child.position.x, expected.x)
            case.assertAlmostEqual(child.position.y, expected.y)
        if task.category_id is not None:
            case.assertIn(task.id, store.categories[task.category_id].task_ids)
    for category in store.categories.values():
        case.assertGreater(len(category.task_ids), 1, f"category {category.id} has one member")
        for tid in category.task_ids:
            case.assertEqual(store.tasks[tid].category_id, category.id)
