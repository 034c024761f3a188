from datetime import date, datetime

import pytest

from budget_dashboard import state
from budget_dashboard.interchange import (
    CSV_COLUMNS,
    export_to_csv,
    financial_data_to_frame,
    import_csv_file,
    import_from_csv,
)

AS_OF = date(2024, 5, 15)
CREATED = datetime(2024, 5, 1, 8, 30)
NOW = datetime(2024, 6, 1, 12, 0)

HEADER = ','.join(CSV_COLUMNS)


def _sample_data():
    data = state.default_financial_data()
    data = state.add_income(data, state.new_income('Salary', 4000, 'monthly', now=CREATED), AS_OF)
    data = state.add_expense(
        data,
        state.new_expense('Netflix', 15.49, 'entertainment', date(2024, 4, 12), is_recurring=True, now=CREATED),
        AS_OF,
    )
    data = state.add_expense(data, state.new_expense('Shoes, running', 90, 'shopping', date(2024, 5, 3), now=CREATED), AS_OF)
    return data


def test_export_frame_columns_and_rows():
    df = financial_data_to_frame(_sample_data())

    assert list(df.columns) == CSV_COLUMNS
    assert list(df['Type']) == ['Income', 'Expense', 'Expense']
    income = df.iloc[0]
    assert income['Category'] == ''
    assert income['IsRecurring'] == 'false'
    assert income['Date'] == '2024-05-01'
    assert income['CreatedAt'] == '2024-05-01T08:30:00'
    assert df.iloc[1]['IsRecurring'] == 'true'
    assert df.iloc[2]['Frequency'] == ''


def test_export_writes_file(tmp_path):
    target = tmp_path / 'out' / 'budget.csv'
    content = export_to_csv(_sample_data(), target)

    assert target.read_text(encoding='utf-8') == content
    assert content.splitlines()[0] == HEADER
    assert '"Shoes, running"' in content


def test_export_then_import_assigns_fresh_ids():
    data = _sample_data()
    incomes, expenses = import_from_csv(export_to_csv(data), now=NOW)

    assert [i.source for i in incomes] == ['Salary']
    assert incomes[0].id != data.incomes[0].id
    assert incomes[0].created_at == CREATED
    assert [e.description for e in expenses] == ['Netflix', 'Shoes, running']
    assert expenses[0].is_recurring is True
    assert expenses[0].frequency == 'monthly'
    assert expenses[0].date == date(2024, 4, 12)
    assert expenses[1].frequency is None
    assert {e.id for e in expenses}.isdisjoint({e.id for e in data.expenses})


def test_import_skips_invalid_amounts_and_types():
    content = '\n'.join([
        HEADER,
        'Income,Bonus,0,,monthly,false,2024-05-01,2024-05-01T00:00:00',
        'Income,Refund,-10,,monthly,false,2024-05-01,2024-05-01T00:00:00',
        'Income,Gift,abc,,monthly,false,2024-05-01,2024-05-01T00:00:00',
        'Transfer,Move,50,,,false,2024-05-01,2024-05-01T00:00:00',
        'Expense,Taxi,30,transportation,,false,not-a-date,2024-05-01T00:00:00',
        'Expense,Coffee,4.5,food,,false,2024-05-02,2024-05-02T07:00:00',
    ])
    incomes, expenses = import_from_csv(content, now=NOW)

    assert incomes == []
    assert [e.description for e in expenses] == ['Coffee']
    assert expenses[0].amount == pytest.approx(4.5)


def test_import_defaults():
    content = '\n'.join([
        HEADER,
        'Income,Side gig,200,,,false,2024-05-01,',
        'Expense,Mystery,20,pets,,FALSE,2024-05-02,2024-05-02T07:00:00',
    ])
    incomes, expenses = import_from_csv(content, now=NOW)

    assert incomes[0].frequency == 'monthly'
    assert incomes[0].created_at == NOW
    assert expenses[0].category == 'other'
    assert expenses[0].is_recurring is False


def test_import_empty_content():
    assert import_from_csv('') == ([], [])
    assert import_from_csv(HEADER + '\n') == ([], [])


def test_import_rejects_missing_columns():
    with pytest.raises(ValueError):
        import_from_csv('Type,Description\nIncome,Salary\n')


def test_import_csv_file(tmp_path):
    target = tmp_path / 'in.csv'
    export_to_csv(_sample_data(), target)
    incomes, expenses = import_csv_file(target, now=NOW)
    assert len(incomes) == 1
    assert len(expenses) == 2


def test_import_accepts_spaced_headers():
    content = '\n'.join([
        'Type,Description,Amount,Category,Frequency,Is Recurring,Date,Created At',
        'Income,Salary,3200,,bi-weekly,false,2024-04-01,2024-04-01T09:15:00.000Z',
        'Expense,Rent,1500,housing,monthly,true,2024-04-03,2024-04-03T10:00:00.000Z',
    ])
    incomes, expenses = import_from_csv(content, now=NOW)

    assert incomes[0].frequency == 'bi-weekly'
    assert incomes[0].created_at == datetime(2024, 4, 1, 9, 15)
    assert expenses[0].is_recurring is True
    assert expenses[0].frequency == 'monthly'
    assert expenses[0].created_at == datetime(2024, 4, 3, 10, 0)
