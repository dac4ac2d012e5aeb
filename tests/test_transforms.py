from datetime import datetime

from homebudget.domain import Frequency, SavingsGoal, SpendingLimit, Transaction, to_millis
from homebudget.transforms import (
    add_transaction,
    build_goal,
    build_limits,
    build_transaction,
    delete_transaction,
    edit_transaction,
    record_goal_expense,
    verify_saved_amounts,
)

NOW = datetime(2025, 6, 18, 10, 0)


def make_goal(id="g1", saved=0.0):
    return SavingsGoal(id, "Laptop", 1000, "2025-12-01", 400, 100, saved, 0)


def test_build_transaction():
    result = build_transaction("  Coffee ", "3.5", NOW, category=" Food ")
    assert result.is_right()
    t = result.get_or_else(None)
    assert t.name == "Coffee"
    assert t.price == 3.5
    assert t.category == "Food"
    assert t.timestamp == to_millis(NOW)
    assert t.id


def test_build_transaction_rejects_bad_input():
    assert build_transaction("", "10", NOW).get_error()["error"] == "missing_field"
    assert build_transaction("Tea", "abc", NOW).get_error()["error"] == "not_a_number"
    assert build_transaction("Tea", "", NOW).get_error()["error"] == "missing_field"
    assert build_transaction("Tea", "-1", NOW).get_error()["error"] == "out_of_range"


def test_add_transaction_is_immutable():
    t1 = Transaction("t1", "Salary", 100, "", 1, "")
    transactions = (t1,)
    new_transactions = add_transaction(transactions, t1)

    assert new_transactions is not transactions
    assert len(new_transactions) == 2
    assert len(transactions) == 1


def test_edit_transaction_keeps_timestamp_and_date():
    t1 = Transaction("t1", "Tea", 2, "06/18/2025", 123, "Drinks")
    result = edit_transaction((t1,), "t1", "Green tea", "2.5")
    edited = result.get_or_else(())[0]
    assert edited.name == "Green tea"
    assert edited.price == 2.5
    assert edited.timestamp == 123
    assert edited.date == "06/18/2025"
    assert edited.category == "Drinks"


def test_edit_transaction_validation():
    t1 = Transaction("t1", "Tea", 2, "", 1, "")
    assert edit_transaction((t1,), "nope", "x", "1").get_error()["error"] == "transaction_not_found"
    assert edit_transaction((t1,), "t1", "x", "one").is_left()


def test_delete_transaction():
    trans = (Transaction("t1", "a", 1, "", 1, ""), Transaction("t2", "b", 2, "", 2, ""))
    assert [t.id for t in delete_transaction(trans, "t1")] == ["t2"]


def test_build_limits_treats_junk_as_unset():
    assert build_limits("100", "", "abc") == SpendingLimit(weekly=100, monthly=0, yearly=0)
    assert build_limits(-5, None, "2500.5") == SpendingLimit(0, 0, 2500.5)


def test_build_goal_validation():
    ok = build_goal("Trip", "5000", "2025-12-31", "2000", "500", NOW)
    assert ok.is_right()
    goal = ok.get_or_else(None)
    assert goal.saved_amount == 0
    assert goal.target_date == "2025-12-31"

    assert build_goal("Trip", "0", "2025-12-31", "1", "1", NOW).get_error()["error"] == "out_of_range"
    assert build_goal("Trip", "10", "someday", "1", "1", NOW).get_error()["error"] == "invalid_date"
    assert build_goal("Trip", "10", "2025-12-31", "", "1", NOW).get_error()["field"] == "monthlyIncome"


def test_goal_expense_increases_saved_amount_exactly():
    goals = (make_goal("g1", 100.0), make_goal("g2", 0.0))
    result = record_goal_expense(goals, (), "g1", "Deposit", "250", NOW, Frequency.WEEKLY)
    assert result.is_right()
    new_goals, new_expenses = result.get_or_else(None)

    assert new_goals[0].saved_amount == 350
    assert new_goals[1].saved_amount == 0
    assert len(new_expenses) == 1
    assert new_expenses[0].goal_id == "g1"
    assert new_expenses[0].frequency is Frequency.WEEKLY
    assert goals[0].saved_amount == 100


def test_goal_expense_requires_existing_goal():
    goals = (make_goal(),)
    assert record_goal_expense(goals, (), None, "x", "1", NOW).get_error()["error"] == "goal_not_found"
    assert record_goal_expense(goals, (), "ghost", "x", "1", NOW).get_error()["error"] == "goal_not_found"
    assert record_goal_expense(goals, (), "g1", "x", "0", NOW).is_left()
    assert record_goal_expense(goals, (), "g1", "x", "5", NOW, "monthly").get_error()["error"] == "invalid_frequency"


def test_saved_amount_matches_expenses_after_each_step():
    goals, expenses = (make_goal(),), ()
    for amount in ("10", "20.5", "30"):
        goals, expenses = record_goal_expense(goals, expenses, "g1", "dep", amount, NOW).get_or_else(None)
        assert verify_saved_amounts(goals, expenses) == ()
    assert goals[0].saved_amount == 60.5


def test_verify_saved_amounts_reports_drift():
    assert verify_saved_amounts((make_goal("g1", 5.0),), ()) == ("g1",)
