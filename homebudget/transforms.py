from datetime import datetime
from functools import reduce
from typing import Optional, Tuple
from uuid import uuid4

from homebudget.domain import (
    Frequency,
    GoalExpense,
    SavingsGoal,
    SpendingLimit,
    Transaction,
    to_millis,
)
from homebudget.functional import (
    Either,
    Right,
    find_goal,
    invalid,
    parse_amount,
    parse_limit,
    parse_target_date,
    require_text,
)

Transactions = Tuple[Transaction, ...]
Goals = Tuple[SavingsGoal, ...]
GoalExpenses = Tuple[GoalExpense, ...]


def new_id() -> str:
    return uuid4().hex


def display_date(now: datetime) -> str:
    return now.strftime("%m/%d/%Y, %I:%M:%S %p")


def build_transaction(
    name: str, price, now: datetime, category: Optional[str] = None
) -> Either[dict, Transaction]:
    checked_name = require_text("name", name)
    if checked_name.is_left():
        return checked_name
    checked_price = parse_amount("price", price)
    if checked_price.is_left():
        return checked_price

    return Right(
        Transaction(
            id=new_id(),
            name=checked_name.get_or_else(""),
            price=checked_price.get_or_else(0.0),
            date=display_date(now),
            timestamp=to_millis(now),
            category=(category or "").strip(),
        )
    )


def add_transaction(trans: Transactions, t: Transaction) -> Transactions:
    return trans + (t,)


def edit_transaction(
    trans: Transactions, tid: str, name: str, price, category: Optional[str] = None
) -> Either[dict, Transactions]:
    if not any(t.id == tid for t in trans):
        return invalid("transaction_not_found", f"Transaction {tid} does not exist", transaction_id=tid)
    checked_name = require_text("name", name)
    if checked_name.is_left():
        return checked_name
    checked_price = parse_amount("price", price)
    if checked_price.is_left():
        return checked_price

    new_name = checked_name.get_or_else("")
    new_price = checked_price.get_or_else(0.0)
    return Right(
        tuple(
            Transaction(
                id=t.id,
                name=new_name,
                price=new_price,
                date=t.date,
                timestamp=t.timestamp,
                category=t.category if category is None else category.strip(),
            )
            if t.id == tid
            else t
            for t in trans
        )
    )


def delete_transaction(trans: Transactions, tid: str) -> Transactions:
    return tuple(filter(lambda t: t.id != tid, trans))


def build_limits(weekly, monthly, yearly) -> SpendingLimit:
    return SpendingLimit(
        weekly=parse_limit(weekly),
        monthly=parse_limit(monthly),
        yearly=parse_limit(yearly),
    )


def build_goal(
    name: str,
    target_amount,
    target_date: str,
    monthly_income,
    weekly_income,
    now: datetime,
) -> Either[dict, SavingsGoal]:
    checked_name = require_text("name", name)
    if checked_name.is_left():
        return checked_name
    target = parse_amount("targetAmount", target_amount, allow_zero=False)
    if target.is_left():
        return target
    if parse_target_date(target_date).is_none():
        return invalid("invalid_date", f"targetDate must be an ISO date, got {target_date!r}", field="targetDate")
    monthly = parse_amount("monthlyIncome", monthly_income)
    if monthly.is_left():
        return monthly
    weekly = parse_amount("weeklyIncome", weekly_income)
    if weekly.is_left():
        return weekly

    return Right(
        SavingsGoal(
            id=new_id(),
            name=checked_name.get_or_else(""),
            target_amount=target.get_or_else(0.0),
            target_date=target_date.strip(),
            monthly_income=monthly.get_or_else(0.0),
            weekly_income=weekly.get_or_else(0.0),
            saved_amount=0.0,
            timestamp=to_millis(now),
        )
    )


def add_goal(goals: Goals, g: SavingsGoal) -> Goals:
    return goals + (g,)


def record_goal_expense(
    goals: Goals,
    expenses: GoalExpenses,
    goal_id: Optional[str],
    name: str,
    amount,
    now: datetime,
    frequency: Frequency = Frequency.DAILY,
) -> Either[dict, Tuple[Goals, GoalExpenses]]:
    """Append an expense and raise its goal's saved amount in one step.

    Returns both updated collections together; callers must persist them
    together as well.
    """
    if find_goal(goals, goal_id).is_none():
        return invalid("goal_not_found", f"Goal {goal_id!r} does not exist", goal_id=goal_id)
    checked_name = require_text("name", name)
    if checked_name.is_left():
        return checked_name
    checked_amount = parse_amount("amount", amount, allow_zero=False)
    if checked_amount.is_left():
        return checked_amount

    try:
        frequency = Frequency(frequency)
    except ValueError:
        return invalid("invalid_frequency", f"frequency must be daily or weekly, got {frequency!r}", field="frequency")

    value = checked_amount.get_or_else(0.0)
    expense = GoalExpense(
        id=new_id(),
        goal_id=goal_id,
        name=checked_name.get_or_else(""),
        amount=value,
        date=display_date(now),
        timestamp=to_millis(now),
        frequency=frequency,
    )
    new_goals = tuple(
        SavingsGoal(
            id=g.id,
            name=g.name,
            target_amount=g.target_amount,
            target_date=g.target_date,
            monthly_income=g.monthly_income,
            weekly_income=g.weekly_income,
            saved_amount=g.saved_amount + value,
            timestamp=g.timestamp,
        )
        if g.id == goal_id
        else g
        for g in goals
    )
    return Right((new_goals, expenses + (expense,)))


def contributed_amount(expenses: GoalExpenses, goal_id: str) -> float:
    return reduce(
        lambda acc, e: acc + e.amount if e.goal_id == goal_id else acc, expenses, 0.0
    )


def verify_saved_amounts(goals: Goals, expenses: GoalExpenses, tolerance: float = 1e-6) -> Tuple[str, ...]:
    """Ids of goals whose saved amount disagrees with their recorded expenses."""
    return tuple(
        g.id for g in goals if abs(g.saved_amount - contributed_amount(expenses, g.id)) > tolerance
    )
