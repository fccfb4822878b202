"""
Parsing and applying AI-suggested sub-trees.

The assistant answers in free text with a JSON object shaped like
``{"type": ..., "title": ..., "children": [...]}`` somewhere inside it.
Applying a suggestion is a plain sequence of repository adds, parent
before child, so each created container's id becomes the ``parent_id``
of its children.
"""
import json
import logging
import re
from typing import List, Optional, Tuple

import pydantic

from goaltree.core.exceptions import ValidationError
from goaltree.models.enums import ContainerKind, RecordKind, TaskFrequency
from goaltree.repositories.goal_repository import GoalRepository
from goaltree.schemas.goal import GoalCreate
from goaltree.schemas.suggestion import SuggestedNode
from goaltree.schemas.task import TaskCreate

logger = logging.getLogger(__name__)

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


def parse_suggestion_from_text(text: str) -> Optional[SuggestedNode]:
    """Extract and validate the suggestion embedded in an assistant reply.

    Returns None when there is no JSON object or it does not describe a
    valid suggestion.
    """
    match = _JSON_OBJECT.search(text or "")
    if not match:
        return None
    try:
        return SuggestedNode.model_validate(json.loads(match.group(0)))
    except (json.JSONDecodeError, pydantic.ValidationError) as e:
        logger.debug("Discarding unparseable suggestion: %s", e)
        return None


def count_suggested_nodes(node: SuggestedNode) -> int:
    count = 0
    stack = [node]
    while stack:
        current = stack.pop()
        count += 1
        stack.extend(current.children)
    return count


async def apply_suggestion(
    repository: GoalRepository,
    suggestion: SuggestedNode,
    parent_id: Optional[int] = None,
) -> List[Tuple[RecordKind, int]]:
    """Create the suggested nodes under ``parent_id``.

    Returns (kind, id) pairs in creation order.
    """
    if suggestion.type == "task" and parent_id is None:
        raise ValidationError("A suggested task needs an existing parent", {"field": "parent_id"})

    created = []
    pending = [(suggestion, parent_id)]
    while pending:
        node, node_parent = pending.pop(0)
        if node.type == "task":
            task_id = await repository.add_task(
                TaskCreate(
                    parent_id=node_parent,
                    title=node.title,
                    description=node.description,
                    frequency=node.frequency or TaskFrequency.once,
                )
            )
            created.append((RecordKind.task, task_id))
            continue

        goal_id = await repository.add_goal(
            GoalCreate(
                title=node.title,
                description=node.description,
                parent_id=node_parent,
                kind=ContainerKind(node.type),
            )
        )
        created.append((RecordKind.container, goal_id))
        pending.extend((child, goal_id) for child in node.children)

    logger.info("Applied suggestion '%s': %s records created", suggestion.title, len(created))
    return created
