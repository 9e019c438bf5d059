from finstatements.consistency import check_balance, check_cash_identity, check_consistency
from finstatements.statements import BSSnapshot, CFSnapshot


def test_balanced_sheet_has_no_warning() -> None:
    bs = BSSnapshot.from_components(100, 0, 40, 0, 60)
    assert check_balance(bs) == []


def test_unbalanced_sheet_reports_delta() -> None:
    bs = BSSnapshot.from_components(100, 20, 40, 0, 60)

    (warning,) = check_balance(bs)

    assert warning.kind == "balance_mismatch"
    assert warning.delta == 20


def test_cash_identity_holds_for_built_snapshots() -> None:
    assert check_cash_identity(CFSnapshot.from_components(10, -3, 2)) == []


def test_broken_cash_identity_is_reported(caplog) -> None:
    cf = CFSnapshot(operating_cf=10, investing_cf=0, financing_cf=0, net_change_in_cash=7)

    (warning,) = check_cash_identity(cf)

    assert warning.kind == "cash_identity_mismatch"
    assert warning.delta == -3
    assert "Cash identity broken" in caplog.text


def test_check_consistency_runs_applicable_checks() -> None:
    bs = BSSnapshot.from_components(1, 0, 0, 0, 0)
    cf = CFSnapshot(operating_cf=1, net_change_in_cash=0)

    assert [w.kind for w in check_consistency(bs=bs, cf=cf)] == [
        "balance_mismatch",
        "cash_identity_mismatch",
    ]
    assert [w.kind for w in check_consistency(cf=cf)] == ["cash_identity_mismatch"]
    assert check_consistency() == []
