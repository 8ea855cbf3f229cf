"""
APIエンドポイントのテスト
"""

import pytest


class TestHealthEndpoints:
    """ヘルスチェックエンドポイントテスト"""

    def test_health_check(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_liveness(self, client):
        assert client.get("/health/live").json() == {"status": "alive"}

    def test_root(self, client):
        assert client.get("/").status_code == 200


class TestAuthentication:
    """ユーザー識別"""

    def test_missing_user_is_unauthorized(self, client):
        response = client.get("/accounts", headers={"X-User-Id": ""})
        assert response.status_code == 401

    def test_malformed_year_cookie(self, client):
        client.cookies.set("selectedYear", "abc")
        response = client.get("/journals")
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_YEAR"

    def test_out_of_range_year_cookie(self, client):
        client.cookies.set("selectedYear", "10000")
        response = client.get("/journals")
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_YEAR"


@pytest.fixture
def chart(client):
    """デフォルト勘定科目（初回一覧で作成される）"""
    response = client.get("/accounts")
    assert response.status_code == 200
    return {a["name"]: a["id"] for a in response.json()["accounts"]}


def journal_body(chart, debit, credit, amount, date="2024-05-01", description="テスト"):
    return {
        "date": date,
        "description": description,
        "entries": [
            {"account_id": chart[debit], "amount": amount, "is_debit": True},
            {"account_id": chart[credit], "amount": amount, "is_debit": False},
        ],
    }


class TestAccountsAPI:
    """勘定科目API"""

    def test_default_chart_is_provisioned(self, client, chart):
        assert "現金" in chart
        assert "元入金" in chart
        groups = client.get("/accounts").json()["groups"]
        assert [g["type"] for g in groups] == ["ASSET", "LIABILITY", "EQUITY", "REVENUE", "EXPENSE"]

    def test_create_and_duplicate(self, client, chart):
        response = client.post("/accounts", json={"name": "新聞図書費", "type": "EXPENSE"})
        assert response.status_code == 201

        response = client.post("/accounts", json={"name": "新聞図書費", "type": "EXPENSE"})
        assert response.status_code == 409
        assert response.json()["code"] == "DUPLICATE_ACCOUNT"

    def test_unknown_type(self, client, chart):
        response = client.post("/accounts", json={"name": "謎", "type": "CONTRA"})
        assert response.status_code == 400


class TestJournalsAPI:
    """仕訳API"""

    def test_create_list_update_delete(self, client, chart):
        response = client.post("/journals", json=journal_body(chart, "現金", "売上高", 100000))
        assert response.status_code == 201
        journal_id = response.json()["id"]

        journals = client.get("/journals").json()["journals"]
        assert [j["id"] for j in journals] == [journal_id]

        response = client.put(
            f"/journals/{journal_id}", json=journal_body(chart, "普通預金", "売上高", 120000)
        )
        assert response.status_code == 200
        assert response.json()["debit_total"] == 120000

        assert client.delete(f"/journals/{journal_id}").json() == {"success": True}
        assert client.get(f"/journals/{journal_id}").status_code == 404

    def test_unbalanced_journal(self, client, chart):
        body = journal_body(chart, "現金", "売上高", 100000)
        body["entries"][1]["amount"] = 90000
        response = client.post("/journals", json=body)
        assert response.status_code == 400
        data = response.json()
        assert data["code"] == "UNBALANCED_JOURNAL"
        assert any("貸方" in e for e in data["errors"])

    def test_journal_of_other_user(self, client, chart):
        journal_id = client.post("/journals", json=journal_body(chart, "現金", "売上高", 100)).json()["id"]
        response = client.delete(f"/journals/{journal_id}", headers={"X-User-Id": "intruder"})
        assert response.status_code == 404

    def test_year_cookie_filters_journals(self, client, chart):
        client.post("/journals", json=journal_body(chart, "現金", "売上高", 100, date="2023-12-31"))
        assert client.get("/journals").json()["journals"] == []
        client.cookies.set("selectedYear", "2023")
        assert len(client.get("/journals").json()["journals"]) == 1


class TestStatementsAPI:
    """決算書・帳簿API"""

    def _post_sample(self, client, chart):
        client.put("/opening-balances", json={"account_id": chart["現金"], "amount": 200000, "is_debit": True})
        client.put("/opening-balances", json={"account_id": chart["元入金"], "amount": 200000, "is_debit": False})
        client.post("/journals", json=journal_body(chart, "現金", "売上高", 80000, date="2024-03-01"))
        client.post(
            "/journals",
            json=journal_body(chart, "地代家賃", "現金", 30000, date="2024-04-25", description="大家さん"),
        )

    def test_statements(self, client, chart):
        self._post_sample(client, chart)

        income = client.get("/statements/income-statement").json()
        assert income["revenue"] == 80000
        assert income["total_expenses"] == 30000

        sheet = client.get("/statements/balance-sheet").json()
        assert sheet["total_assets"] == 250000
        assert sheet["net_income"] == 50000
        assert sheet["is_balanced"] is True

        summary = client.get("/statements/summary").json()
        assert summary["net_income"] == 50000

        rows = client.get("/statements/trial-balance").json()["rows"]
        assert rows[-1]["借方残高"] == rows[-1]["貸方残高"]

    def test_ledger_and_reports(self, client, chart):
        self._post_sample(client, chart)

        ledger = client.get(f"/ledger/{chart['現金']}").json()
        assert [r["残高"] for r in ledger["rows"]] == [200000, 280000, 250000]
        assert ledger["rows"][0]["摘要"] == "前期繰越"

        monthly = client.get("/reports/monthly").json()
        assert monthly["months"][2]["収益"] == 80000
        assert monthly["total_expense"] == 30000

        payee = client.get("/reports/payee").json()["rows"]
        assert payee == [{"勘定科目": "地代家賃", "支払先": "大家さん", "金額": 30000}]

    def test_ledger_unknown_account(self, client, chart):
        response = client.get("/ledger/00000000-0000-0000-0000-000000000000")
        assert response.status_code == 404

    def test_opening_balance_rejected_for_revenue(self, client, chart):
        response = client.put(
            "/opening-balances", json={"account_id": chart["売上高"], "amount": 1000, "is_debit": False}
        )
        assert response.status_code == 400


class TestClosingAndDepreciationAPI:
    """年次繰越・減価償却API"""

    def test_yearly_closing(self, client, chart):
        client.put("/opening-balances", json={"account_id": chart["元入金"], "amount": 200000, "is_debit": False})
        client.put("/opening-balances", json={"account_id": chart["現金"], "amount": 200000, "is_debit": True})
        client.post("/journals", json=journal_body(chart, "現金", "売上高", 50000))

        response = client.post("/yearly-closing", json={"year": 2024})
        assert response.status_code == 200
        assert response.json()["next_year"] == 2025

        balances = client.get("/opening-balances", params={"year": 2025}).json()["opening_balances"]
        by_name = {b["account_name"]: (b["amount"], b["is_debit"]) for b in balances}
        assert by_name["元入金"] == (250000, False)
        assert by_name["現金"] == (250000, True)

    def test_yearly_closing_invalid_year(self, client, chart):
        response = client.post("/yearly-closing", json={"year": 0})
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_YEAR"

    def test_depreciate_twice(self, client, chart):
        response = client.post(
            "/fixed-assets",
            json={"name": "パソコン", "acquisition_date": "2024-04-01", "acquisition_cost": 480000, "useful_life": 4},
        )
        assert response.status_code == 201

        first = client.post("/fixed-assets/depreciate")
        assert first.status_code == 200
        assert first.json()["total_depreciation"] == 120000

        second = client.post("/fixed-assets/depreciate")
        assert second.status_code == 409
        assert second.json()["code"] == "DEPRECIATION_ALREADY_POSTED"

        journals = client.get("/journals").json()["journals"]
        assert len(journals) == 1

    def test_invalid_fixed_asset(self, client):
        response = client.post(
            "/fixed-assets",
            json={"name": "", "acquisition_date": "2024-04-01", "acquisition_cost": 0, "useful_life": 4},
        )
        assert response.status_code == 400
        assert len(response.json()["errors"]) == 2
