"""Demo "Buy a House" tree showing every level of the hierarchy."""
import logging

from goaltree.models.enums import ContainerKind, RecordKind, TaskFrequency
from goaltree.repositories.goal_repository import GoalRepository
from goaltree.schemas.goal import GoalCreate
from goaltree.schemas.task import TaskCreate
from goaltree.schemas.tree import SeedResponse

logger = logging.getLogger(__name__)

REQUIREMENTS = [
    ("Budget: $500,000 max", "Total budget including closing costs and initial repairs"),
    ("Location: Within 30 min commute", "Prefer suburbs with good schools and public transit access"),
    ("Timeline: 18-24 months", "Aim to close by Q4 2027"),
]

# (milestone title, description, [(task title, description, frequency, weekly_days, measurement)])
MILESTONES = [
    (
        "Financial Preparation",
        "Get finances in order for mortgage approval",
        [
            ("Save $100,000 for down payment", "Target 20% down to avoid PMI", TaskFrequency.once, [], "$100,000"),
            ("Review and improve credit score", "Check credit report for errors, pay down debt", TaskFrequency.weekly, [1], None),
            ("Get pre-approved for mortgage", "Contact at least 3 lenders to compare rates", TaskFrequency.once, [], None),
            ("Track monthly expenses", "Maintain budget spreadsheet to maximize savings", TaskFrequency.daily, [], None),
        ],
    ),
    (
        "House Hunting",
        "Research and visit potential homes",
        [
            ("Research neighborhoods", "Look into crime rates, schools, amenities", TaskFrequency.weekly, [0, 6], None),
            ("Browse listings on Zillow/Redfin", "Set up alerts for new listings in target areas", TaskFrequency.daily, [], None),
            ("Find a real estate agent", "Interview at least 3 agents, check references", TaskFrequency.once, [], None),
            ("Attend open houses", "Visit at least 2-3 houses per weekend", TaskFrequency.weekly, [0, 6], "2-3 houses"),
        ],
    ),
    (
        "Closing Process",
        "Finalize the purchase after finding the right home",
        [
            ("Make an offer", "Work with agent to submit competitive offer", TaskFrequency.once, [], None),
            ("Schedule home inspection", "Hire licensed inspector to check for issues", TaskFrequency.once, [], None),
            ("Negotiate repairs/price", "Based on inspection results", TaskFrequency.once, [], None),
            ("Finalize mortgage", "Lock in rate and complete paperwork", TaskFrequency.once, [], None),
            ("Close on the house", "Sign final documents and get keys!", TaskFrequency.once, [], None),
        ],
    ),
]


async def is_database_seeded(repository: GoalRepository) -> bool:
    return await repository.count_goals() > 0


async def clear_database(repository: GoalRepository) -> int:
    """Cascade delete every root. Returns the number of removed records."""
    removed = 0
    for root in await repository.list_roots():
        removed += await repository.delete(root.id, RecordKind.container)
    return removed


async def seed_demo_tree(repository: GoalRepository, force: bool = False) -> SeedResponse:
    """Insert the demo tree. Only seeds an empty store unless ``force``."""
    result = SeedResponse()
    if await is_database_seeded(repository):
        if not force:
            return result
        await clear_database(repository)

    root_id = await repository.add_goal(
        GoalCreate(
            title="Buy a House",
            description="Purchase our first home within the next 2 years",
            order=0,
        )
    )
    result.goals_created += 1

    order = 0
    for title, description in REQUIREMENTS:
        await repository.add_goal(
            GoalCreate(
                title=title,
                description=description,
                parent_id=root_id,
                kind=ContainerKind.requirement,
                order=order,
            )
        )
        result.goals_created += 1
        order += 1

    for title, description, tasks in MILESTONES:
        milestone_id = await repository.add_goal(
            GoalCreate(
                title=title,
                description=description,
                parent_id=root_id,
                kind=ContainerKind.milestone,
                order=order,
            )
        )
        result.goals_created += 1
        order += 1

        for position, (task_title, task_description, frequency, weekly_days, measurement) in enumerate(tasks):
            await repository.add_task(
                TaskCreate(
                    parent_id=milestone_id,
                    title=task_title,
                    description=task_description,
                    frequency=frequency,
                    weekly_days=weekly_days,
                    measurement=measurement,
                    order=position,
                )
            )
            result.tasks_created += 1

    logger.info("Seeded demo tree: %s goals, %s tasks", result.goals_created, result.tasks_created)
    return result
