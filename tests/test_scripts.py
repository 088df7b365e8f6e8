import importlib.util
import json
from pathlib import Path

import openpyxl

SCRIPTS_DIR = Path(__file__).resolve().parents[1] / 'scripts'


def _load_script(name):
    spec = importlib.util.spec_from_file_location(f'{name}_test', SCRIPTS_DIR / f'{name}.py')
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def _write_local_store(path):
    path.write_text(
        json.dumps(
            {
                'budget': 100.0,
                'expenses': [
                    {'id': 'a1', 'amount': 12.5, 'category': 'food', 'date': '2025-03-02T10:00:00'},
                    {'id': 'b2', 'amount': 40.0, 'category': 'Gym', 'date': '2025-03-10T18:30:00'},
                    {'id': 'c3', 'amount': 7.0, 'category': 'travel', 'date': '2025-02-27T08:00:00'},
                ],
            }
        ),
        encoding='utf-8',
    )


def test_setup_database_creates_schema(tmp_path, capsys):
    module = _load_script('setup_database')
    db_path = tmp_path / 'setup.db'
    assert module.main(['--db', str(db_path)]) == 0
    assert db_path.exists()
    assert 'idx_expenses_user_date' in capsys.readouterr().out


def test_export_report_csv_for_month(tmp_path):
    module = _load_script('export_report')
    store = tmp_path / 'store.json'
    _write_local_store(store)
    out_dir = tmp_path / 'reports'
    argv = ['--backend', 'local', '--store-path', str(store), '--month', '2025-03', '--output-dir', str(out_dir)]
    assert module.main(argv) == 0
    text = (out_dir / 'expense_report_March_2025.csv').read_text(encoding='utf-8')
    assert text == 'Date,Amount,Category\n10/03/2025,40.00,Gym\n02/03/2025,12.50,Food\n'


def test_export_report_xlsx_all_time(tmp_path):
    module = _load_script('export_report')
    store = tmp_path / 'store.json'
    _write_local_store(store)
    argv = ['--backend', 'local', '--store-path', str(store), '--format', 'xlsx', '--output-dir', str(tmp_path)]
    assert module.main(argv) == 0
    workbook = openpyxl.load_workbook(tmp_path / 'expense_report_All_Time.xlsx')
    sheet = workbook['Expenses']
    assert sheet.max_row == 4
    assert sheet['B4'].value == 7.0


def test_export_report_empty_month_fails(tmp_path, capsys):
    module = _load_script('export_report')
    store = tmp_path / 'store.json'
    _write_local_store(store)
    argv = ['--backend', 'local', '--store-path', str(store), '--month', '2024-01', '--output-dir', str(tmp_path)]
    assert module.main(argv) == 1
    assert 'No expenses to export for January 2024' in capsys.readouterr().out
    assert not list(tmp_path.glob('expense_report_*'))
