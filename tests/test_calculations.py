from datetime import date, datetime

import pytest

from budget_dashboard.calculations import (
    category_breakdown,
    category_spending,
    dashboard_summary,
    monthly_equivalent,
    monthly_trend,
    monthly_trend_dataframe,
    resolve_as_of,
    total_monthly_expenses,
    total_monthly_income,
)
from budget_dashboard.models import EXPENSE_CATEGORIES, FREQUENCIES, Expense, Income

AS_OF = date(2024, 5, 15)
STAMP = datetime(2024, 1, 1, 9, 30)


def _income(amount, frequency='monthly', income_id='income-1'):
    return Income(
        id=income_id,
        source='Salary',
        amount=amount,
        frequency=frequency,
        created_at=STAMP,
        updated_at=STAMP,
    )


def _expense(amount, category='other', on=AS_OF, recurring=False, frequency=None, expense_id='expense-1'):
    return Expense(
        id=expense_id,
        description='Something',
        amount=amount,
        category=category,
        date=on,
        created_at=STAMP,
        updated_at=STAMP,
        is_recurring=recurring,
        frequency=frequency,
    )


def test_monthly_equivalent_per_frequency():
    assert monthly_equivalent(100, 'weekly') == pytest.approx(433.0)
    assert monthly_equivalent(100, 'bi-weekly') == pytest.approx(217.0)
    assert monthly_equivalent(100, 'monthly') == 100
    assert monthly_equivalent(1200, 'yearly') == pytest.approx(100.0)


def test_monthly_equivalent_unknown_frequency_is_identity():
    assert monthly_equivalent(250, 'fortnightly') == 250
    assert monthly_equivalent(250, None) == 250
    assert monthly_equivalent(250, '') == 250


@pytest.mark.parametrize('frequency', FREQUENCIES)
@pytest.mark.parametrize('factor', [0, 0.5, 3, 12.25])
def test_monthly_equivalent_is_linear(frequency, factor):
    base = 137.5
    assert monthly_equivalent(factor * base, frequency) == pytest.approx(
        factor * monthly_equivalent(base, frequency)
    )


def test_weekly_income_scenario():
    assert total_monthly_income([_income(1000, 'weekly')]) == pytest.approx(4330)


def test_total_monthly_income_empty_and_order_independent():
    assert total_monthly_income([]) == 0
    incomes = [
        _income(1000, 'weekly', 'a'),
        _income(2400, 'yearly', 'b'),
        _income(900, 'bi-weekly', 'c'),
        _income(3000, 'monthly', 'd'),
    ]
    assert total_monthly_income(incomes) == pytest.approx(total_monthly_income(list(reversed(incomes))))


def test_total_monthly_expenses_current_month_counts_at_face_value():
    expenses = [
        _expense(50, on=date(2024, 5, 1)),
        _expense(100, on=date(2024, 5, 31), recurring=True, frequency='weekly'),
    ]
    # Recurring charge landed this month, so no weekly projection
    assert total_monthly_expenses(expenses, AS_OF) == pytest.approx(150)


def test_total_monthly_expenses_projects_recurring_and_drops_past_one_offs():
    expenses = [
        _expense(100, on=date(2024, 2, 10), recurring=True, frequency='monthly'),
        _expense(120, on=date(2023, 12, 1), recurring=True, frequency='yearly'),
        _expense(999, on=date(2024, 4, 30)),
    ]
    assert total_monthly_expenses(expenses, AS_OF) == pytest.approx(110)


def test_frequency_ignored_when_not_recurring():
    stale = _expense(80, on=date(2024, 3, 3), recurring=False, frequency='weekly')
    assert stale.effective_frequency is None
    assert total_monthly_expenses([stale], AS_OF) == 0
    assert category_spending([stale], AS_OF)['other'] == 0


def test_recurring_without_frequency_is_not_projected():
    expense = _expense(80, on=date(2024, 3, 3), recurring=True, frequency=None)
    assert total_monthly_expenses([expense], AS_OF) == 0


def test_category_spending_always_has_every_category():
    assert set(category_spending([], AS_OF)) == set(EXPENSE_CATEGORIES)
    spending = category_spending([_expense(40, 'food')], AS_OF)
    assert len(spending) == 11
    assert spending['food'] == 40
    assert spending['debt'] == 0


def test_category_spending_normalizes_current_month_recurring():
    expense = _expense(100, 'entertainment', on=date(2024, 5, 2), recurring=True, frequency='weekly')
    assert category_spending([expense], AS_OF)['entertainment'] == pytest.approx(433)
    assert total_monthly_expenses([expense], AS_OF) == pytest.approx(100)


def test_category_spending_excludes_past_one_offs():
    spending = category_spending([_expense(70, 'shopping', on=date(2024, 4, 2))], AS_OF)
    assert spending['shopping'] == 0


def test_recurring_expense_from_three_months_ago():
    expense = _expense(100, 'utilities', on=date(2024, 2, 10), recurring=True, frequency='monthly')

    assert total_monthly_expenses([expense], AS_OF) == pytest.approx(100)
    trend = monthly_trend([], [expense], as_of=AS_OF)
    assert [point.expenses for point in trend] == pytest.approx([100] * 6)


def test_monthly_trend_shape_and_labels():
    incomes = [_income(3000)]
    expenses = [_expense(25, on=date(2024, 1, 20), expense_id=f'e{i}') for i in range(40)]
    trend = monthly_trend(incomes, expenses, as_of=AS_OF)

    assert len(trend) == 6
    assert [point.month for point in trend] == [
        'Dec 2023', 'Jan 2024', 'Feb 2024', 'Mar 2024', 'Apr 2024', 'May 2024',
    ]
    assert all(point.income == 3000 for point in trend)
    assert trend[1].expenses == pytest.approx(1000)
    assert trend[-1].expenses == 0


def test_monthly_trend_respects_months_back():
    assert len(monthly_trend([], [], months_back=12, as_of=AS_OF)) == 12
    assert monthly_trend([], [], months_back=0, as_of=AS_OF) == []


def test_monthly_trend_dataframe_adds_net():
    df = monthly_trend_dataframe(monthly_trend([_income(500)], [_expense(200)], as_of=AS_OF))
    assert list(df.columns) == ['Month', 'Income', 'Expenses', 'Net']
    assert df.iloc[-1]['Net'] == pytest.approx(300)
    assert monthly_trend_dataframe([]).empty


def test_category_breakdown_uses_raw_amounts():
    expenses = [
        _expense(300, 'housing', expense_id='a'),
        _expense(100, 'food', on=date(2024, 1, 1), recurring=True, frequency='weekly', expense_id='b'),
        _expense(50, 'food', on=date(2024, 4, 1), expense_id='c'),
    ]
    df = category_breakdown(expenses, AS_OF)

    amounts = dict(zip(df['Category'], df['Amount']))
    assert amounts == {'housing': 300, 'food': 100}
    assert df['Percentage'].sum() == pytest.approx(100)
    assert category_breakdown([], AS_OF).empty


def test_dashboard_summary_collects_view_models():
    summary = dashboard_summary([_income(4000)], [_expense(1000, 'housing')], AS_OF)
    assert summary.total_income == 4000
    assert summary.total_expenses == 1000
    assert summary.net_income == 3000
    assert summary.savings_rate == pytest.approx(75)
    assert len(summary.monthly_trend) == 6
    assert summary.category_breakdown == [
        {'category': 'housing', 'amount': 1000, 'percentage': 100.0},
    ]


def test_resolve_as_of_accepts_datetimes():
    assert resolve_as_of(datetime(2024, 5, 15, 23, 59)) == AS_OF
    assert resolve_as_of(AS_OF) == AS_OF
    assert isinstance(resolve_as_of(), date)
