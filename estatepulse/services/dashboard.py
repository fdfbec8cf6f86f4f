"""Dashboard aggregation over already loaded records."""

from estatepulse.models.agency import User, UserRole
from estatepulse.models.contact import Contact
from estatepulse.models.dashboard import AgentPerformance, DashboardStats
from estatepulse.models.listing import Listing, ListingStatus
from estatepulse.models.task import Task, TaskStatus


def compute_dashboard_stats(
    contacts: list[Contact],
    listings: list[Listing],
    tasks: list[Task],
    users: list[User],
) -> DashboardStats:
    sold = [listing for listing in listings if listing.status == ListingStatus.SOLD]

    leaderboard = []
    for agent in users:
        if agent.role != UserRole.AGENT:
            continue
        agent_sold = [listing for listing in sold if listing.assigned_agent == agent.id]
        leaderboard.append(AgentPerformance(
            user_id=agent.id,
            name=agent.name,
            avatar=agent.avatar,
            closed=len(agent_sold),
            closed_volume=sum(listing.price for listing in agent_sold),
        ))
    leaderboard.sort(key=lambda entry: entry.closed_volume, reverse=True)

    return DashboardStats(
        active_listings=sum(1 for listing in listings if listing.status == ListingStatus.ACTIVE),
        closed_listings=len(sold),
        pending_tasks=sum(1 for task in tasks if task.status == TaskStatus.PENDING),
        total_contacts=len(contacts),
        sales_volume=sum(listing.price for listing in sold),
        listing_status_breakdown={
            status.value: sum(1 for listing in listings if listing.status == status)
            for status in ListingStatus
        },
        leaderboard=leaderboard,
    )
