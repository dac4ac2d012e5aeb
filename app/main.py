import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import asyncio
import time
from datetime import date, datetime, timedelta

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st

from homebudget.config import config, configure_logging, format_currency
from homebudget.domain import ONE_DAY_MS, Frequency, GoalStatus, from_millis, to_millis
from homebudget.events import EventBus, register_default_handlers
from homebudget.filters import by_category, by_timestamp_range, category_key, date_tabs, transactions_on_day
from homebudget.periods import day_total
from homebudget.services import BudgetService, ReportService
from homebudget.storage import JsonFileRecordStore, RecordRepository, StorageError
from homebudget.theme import ThemeSettings
from homebudget.trends import TrendSeries, savings_trend

configure_logging(config)
st.set_page_config(page_title="Household Budget", layout="wide")


def run(coro):
    return asyncio.run(coro)


if "service" not in st.session_state:
    repo = RecordRepository(JsonFileRecordStore(config.data_path))
    bus = register_default_handlers(EventBus())
    st.session_state.service = BudgetService(repo, bus)
    st.session_state.theme = ThemeSettings(repo, bus)
    st.session_state.loaded_at = 0.0
    try:
        run(st.session_state.theme.load())
    except StorageError as e:
        st.sidebar.error(f"Failed to load theme preference: {e}")

service: BudgetService = st.session_state.service
theme: ThemeSettings = st.session_state.theme
reports = ReportService(config)

if time.time() - st.session_state.loaded_at >= config.refresh_interval:
    loaded = run(service.refresh())
    if loaded.is_left():
        st.error(f"Failed to load data: {loaded.get_error()['message']}")
    else:
        st.session_state.loaded_at = time.time()


def show_result(result, success: str) -> bool:
    if result.is_left():
        st.error(result.get_error()["message"])
        return False
    st.success(success)
    st.session_state.loaded_at = time.time()
    return True


def trend_chart(series: TrendSeries, title: str, kind: str = "line"):
    frame = pd.DataFrame({"period": list(series.labels), "amount": list(series.data)})
    colors = [theme.palette()["accent"]]
    if kind == "bar":
        fig = px.bar(frame, x="period", y="amount", title=title, template=theme.plotly_template(),
                     color_discrete_sequence=colors)
    else:
        fig = px.line(frame, x="period", y="amount", title=title, markers=True, template=theme.plotly_template(),
                      color_discrete_sequence=colors)
    fig.update_layout(margin=dict(t=40, b=10, l=10, r=10), height=300)
    return fig


def limit_bar(label: str, status):
    if not status.is_set:
        st.caption(f"{label}: no limit set")
        return
    caption = "Over limit" if status.over_limit else f"Limit: {format_currency(status.limit)}"
    st.caption(f"{label}: {format_currency(status.total)} · {caption}")
    st.progress(status.percent / 100)


menu = st.sidebar.radio(
    "Menu",
    ["🏠 Dashboard", "💸 Budget", "🎯 Savings", "📊 Insights", "⚙️ Settings"]
)

if st.sidebar.button("🔄 Refresh now"):
    st.session_state.loaded_at = 0.0
    st.rerun()

report = reports.dashboard(service.snapshot)

if menu == "🏠 Dashboard":
    st.title("Dashboard")
    k1, k2, k3 = st.columns(3)
    with k1:
        st.metric("Today", format_currency(report.totals.daily))
    with k2:
        st.metric("This Week", format_currency(report.totals.weekly))
    with k3:
        st.metric("This Month", format_currency(report.totals.monthly))

    c1, c2 = st.columns(2)
    with c1:
        st.plotly_chart(trend_chart(report.weekly_trend, "Weekly Trends"), use_container_width=True)
    with c2:
        if report.top_categories:
            frame = pd.DataFrame(report.top_categories, columns=["category", "amount"])
            fig = px.pie(frame, values="amount", names="category", title="Top Categories",
                         template=theme.plotly_template())
            st.plotly_chart(fig, use_container_width=True)
        else:
            st.info("No transactions to display.")

    st.subheader("🎯 Goals by urgency")
    if not report.goals:
        st.info("No savings goals yet")
    for p in report.goals:
        days = "unknown" if p.days_left is None else f"{p.days_left} days left"
        st.markdown(f"**{p.goal.name}** · {p.progress:.1f}% · {days}")
        st.progress(p.display_progress / 100)

elif menu == "💸 Budget":
    st.title("💸 Budget")

    k1, k2, k3, k4 = st.columns(4)
    with k1:
        st.metric("Today", format_currency(report.totals.daily))
    with k2:
        st.metric("This Week", format_currency(report.totals.weekly))
    with k3:
        st.metric("This Month", format_currency(report.totals.monthly))
    with k4:
        st.metric("This Year", format_currency(report.totals.yearly))

    for label, key in (("Weekly", "weekly"), ("Monthly", "monthly"), ("Yearly", "yearly")):
        limit_bar(label, report.limits[key])

    with st.expander("⚙️ Spending limits"):
        current = service.snapshot.limits
        with st.form("limits_form"):
            weekly = st.text_input("Weekly limit", value=str(current.weekly))
            monthly = st.text_input("Monthly limit", value=str(current.monthly))
            yearly = st.text_input("Yearly limit", value=str(current.yearly))
            if st.form_submit_button("Save limits"):
                if show_result(run(service.update_limits(weekly, monthly, yearly)), "Limits saved"):
                    for alert in service.check_limits():
                        st.warning(alert["message"])

    with st.form("add_tx", clear_on_submit=True):
        st.subheader("➕ Add transaction")
        c1, c2, c3 = st.columns(3)
        with c1:
            name = st.text_input("Name")
        with c2:
            price = st.text_input("Price")
        with c3:
            category = st.text_input("Category (optional)")
        if st.form_submit_button("Add"):
            show_result(run(service.add_transaction(name, price, category)), "Transaction added")

    tabs = date_tabs(datetime.now(), config.date_tab_count)
    options = ["All"] + [str(t.day) for t in tabs if not t.disabled]
    picked = st.radio("Day", options, horizontal=True)
    selected = None if picked == "All" else next(t.timestamp for t in tabs if str(t.day) == picked)
    picked_date = st.date_input("…or pick a date", value=None)
    if picked_date is not None:
        selected = to_millis(datetime(picked_date.year, picked_date.month, picked_date.day))

    shown = transactions_on_day(service.snapshot.transactions, selected)
    categories = sorted({category_key(t.category) for t in shown})
    category_pick = st.selectbox("Category", ["All"] + categories)
    if category_pick != "All":
        shown = tuple(filter(by_category(category_pick), shown))
    if selected is not None:
        st.caption(f"Total for the day: {format_currency(day_total(shown, selected))}")

    if shown:
        frame = pd.DataFrame([t.to_dict() for t in shown])
        frame["price"] = frame["price"].map(format_currency)
        st.dataframe(frame[["name", "price", "category", "date"]], use_container_width=True)

        by_id = {t.id: t for t in shown}
        chosen = by_id[st.selectbox(
            "Transaction",
            list(by_id),
            format_func=lambda tid: f"{by_id[tid].name} · {format_currency(by_id[tid].price)} · {by_id[tid].date}",
        )]
        with st.form("edit_tx"):
            new_name = st.text_input("Name", value=chosen.name)
            new_price = st.text_input("Price", value=str(chosen.price))
            new_category = st.text_input("Category", value=chosen.category)
            c1, c2 = st.columns(2)
            with c1:
                save = st.form_submit_button("Save changes")
            with c2:
                delete = st.form_submit_button("Delete")
            if save:
                show_result(run(service.edit_transaction(chosen.id, new_name, new_price, new_category)),
                            "Transaction updated")
            elif delete:
                show_result(run(service.delete_transaction(chosen.id)), "Transaction deleted")
    else:
        st.info("No transactions for this selection")

elif menu == "🎯 Savings":
    st.title("🎯 Savings Goals")

    with st.expander("➕ New goal"):
        with st.form("add_goal", clear_on_submit=True):
            goal_name = st.text_input("Goal name")
            target_amount = st.text_input("Target amount")
            target_date = st.date_input("Target date", value=date.today() + timedelta(days=90))
            monthly_income = st.text_input("Monthly income")
            weekly_income = st.text_input("Weekly income")
            if st.form_submit_button("Create goal"):
                show_result(
                    run(service.add_goal(goal_name, target_amount, target_date.isoformat(),
                                         monthly_income, weekly_income)),
                    "Goal created",
                )

    goals = {g.id: g for g in service.snapshot.goals}
    with st.expander("💰 Record savings"):
        with st.form("add_expense", clear_on_submit=True):
            goal_pick = st.selectbox(
                "Goal",
                [None] + list(goals),
                format_func=lambda gid: "—" if gid is None else f"{goals[gid].name} · target {goals[gid].target_date}",
            )
            expense_name = st.text_input("Description")
            expense_amount = st.text_input("Amount")
            frequency = st.radio("Frequency", [f.value for f in Frequency], horizontal=True)
            if st.form_submit_button("Record"):
                show_result(
                    run(service.add_goal_expense(goal_pick, expense_name,
                                                 expense_amount, frequency)),
                    "Savings recorded",
                )

    status_icon = {
        GoalStatus.GOAL_REACHED: "🏆",
        GoalStatus.ON_TRACK: "✅",
        GoalStatus.NEEDS_ATTENTION: "⚠️",
    }
    for p in report.goals:
        st.subheader(f"{status_icon[p.status]} {p.goal.name}")
        c1, c2, c3 = st.columns(3)
        with c1:
            st.metric("Saved", format_currency(p.goal.saved_amount),
                      f"of {format_currency(p.goal.target_amount)}")
        with c2:
            needed = p.weekly_savings_needed
            st.metric("Needed weekly", "—" if needed is None else format_currency(needed))
        with c3:
            needed = p.monthly_savings_needed
            st.metric("Needed monthly", "—" if needed is None else format_currency(needed))
        st.progress(p.display_progress / 100)
        st.caption(f"{p.status.value} · target {p.goal.target_date}")

        trend = savings_trend(p.goal.id, service.snapshot.goal_expenses, config.monthly_trend_months)
        if trend.labels:
            st.plotly_chart(trend_chart(trend, "Savings by month", kind="bar"), use_container_width=True)

elif menu == "📊 Insights":
    st.title("📊 Budget Insights")

    st.metric("Today", format_currency(report.totals.daily))
    limit_bar("Daily allowance", report.daily_allowance)
    for label, key in (("Weekly", "weekly"), ("Monthly", "monthly"), ("Yearly", "yearly")):
        limit_bar(label, report.limits[key])

    c1, c2 = st.columns(2)
    with c1:
        st.plotly_chart(trend_chart(report.daily_trend, "Last 7 days"), use_container_width=True)
    with c2:
        st.plotly_chart(trend_chart(report.monthly_trend, "Monthly trends", kind="bar"), use_container_width=True)

    if report.categories:
        frame = pd.DataFrame(report.categories, columns=["category", "amount"])
        fig = go.Figure(go.Pie(labels=frame["category"], values=frame["amount"], hole=0.4))
        fig.update_layout(title="Spending by category", template=theme.plotly_template())
        st.plotly_chart(fig, use_container_width=True)

        now_ms = to_millis(report.now)
        window = by_timestamp_range(now_ms - config.daily_trend_days * ONE_DAY_MS, now_ms)
        recent = [t for t in service.snapshot.transactions if window(t)]
        st.subheader(f"Last {config.daily_trend_days} days")
        if recent:
            frame = pd.DataFrame(
                [{"name": t.name, "amount": t.price, "when": from_millis(t.timestamp)} for t in recent]
            ).sort_values("when", ascending=False).head(10)
            st.table(frame.assign(amount=frame["amount"].map(format_currency)).reset_index(drop=True))
        else:
            st.info("Nothing spent in this window.")
    else:
        st.info("No transactions to display.")

elif menu == "⚙️ Settings":
    st.title("⚙️ Settings")
    st.write(f"Theme: **{theme.theme.value}**")
    if st.button("Toggle dark mode"):
        try:
            run(theme.toggle())
            st.rerun()
        except StorageError as e:
            st.error(f"Failed to save theme preference: {e}")

    st.divider()
    if st.button("🗑️ Clear all data", type="primary"):
        show_result(run(service.clear_all()), "All data cleared successfully")
