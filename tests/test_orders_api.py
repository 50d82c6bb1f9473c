"""Order capture and back-office API tests."""

from datetime import date, datetime, time
from decimal import Decimal
from pathlib import Path

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from farine.db import session as db_session
from farine.db.base import Base
from farine.main import app
from farine.models import Category, Order, OrderItem, Product
from farine.services.order_service import next_daily_increment

# Tuesday morning, week of 2025-12-14 (Sunday and Monday closed).
NOW = datetime(2025, 12, 16, 10, 0)


def _build_test_engine(db_file: Path) -> Engine:
    return create_engine(
        f"sqlite:///{db_file}",
        connect_args={"check_same_thread": False},
    )


def _use_test_db(tmp_path: Path, monkeypatch, name: str) -> sessionmaker:
    engine = _build_test_engine(tmp_path / name)
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    monkeypatch.setattr(db_session, "engine", engine)
    monkeypatch.setattr(db_session, "SessionLocal", testing_session_local)
    monkeypatch.setattr("farine.api.v1.endpoints.orders.local_now", lambda: NOW)
    return testing_session_local


def _seed_catalog(testing_session_local: sessionmaker) -> dict[str, int]:
    with testing_session_local() as db:
        bread = Category(name="Pain", sort_order=1)
        pastry = Category(name="Viennoiseries", sort_order=2)
        db.add_all([bread, pastry])
        db.flush()

        baguette = Product(category_id=bread.id, name="Baguette", unit="unité", price_ttc=Decimal("1.20"))
        seigle = Product(category_id=bread.id, name="Seigle", unit="kg", price_ttc=Decimal("8.40"))
        croissant = Product(category_id=pastry.id, name="Croissant", unit="unité", price_ttc=Decimal("1.35"))
        retired = Product(
            category_id=pastry.id,
            name="Chausson",
            unit="unité",
            price_ttc=Decimal("2.10"),
            is_active=False,
        )
        db.add_all([baguette, seigle, croissant, retired])
        db.commit()
        return {
            "baguette": baguette.id,
            "seigle": seigle.id,
            "croissant": croissant.id,
            "retired": retired.id,
        }


def _order_payload(items: list[dict], pickup_date: str, pickup_time: str = "10:00", **extra: str) -> dict:
    payload = {
        "customer_name": "Dupont",
        "customer_phone": "06 12 34 56 78",
        "pickup_date": pickup_date,
        "pickup_time": pickup_time,
        "items": items,
    }
    payload.update(extra)
    return payload


def test_bread_order_is_numbered_and_priced_from_catalog(tmp_path: Path, monkeypatch) -> None:
    testing_session_local = _use_test_db(tmp_path, monkeypatch, "test_order_create.db")
    ids = _seed_catalog(testing_session_local)

    with TestClient(app) as client:
        first = client.post(
            "/api/v1/orders",
            json=_order_payload(
                [{"product_id": ids["baguette"], "quantity": 3}, {"product_id": ids["croissant"], "quantity": 2}],
                "2025-12-19",
                customer_comment="  Bien cuite  ",
            ),
        )
        second = client.post(
            "/api/v1/orders",
            json=_order_payload([{"product_id": ids["croissant"], "quantity": 1}], "2025-12-17", customer_name="Éloïse"),
        )

    assert first.status_code == 201
    body = first.json()
    assert body["order_number"] == "DUP251216001"
    assert body["status"] == "A préparer"
    assert body["customer_comment"] == "Bien cuite"
    assert Decimal(body["total_ttc"]) == Decimal("6.30")
    assert [item["product_name"] for item in body["items"]] == ["Baguette", "Croissant"]
    assert Decimal(body["items"][0]["subtotal_ttc"]) == Decimal("3.60")

    assert second.status_code == 201
    assert second.json()["order_number"] == "ELO251216002"

    with testing_session_local() as db:
        assert db.query(Order).count() == 2


def test_bread_cart_cannot_be_picked_up_before_lead_time(tmp_path: Path, monkeypatch) -> None:
    testing_session_local = _use_test_db(tmp_path, monkeypatch, "test_order_lead_time.db")
    ids = _seed_catalog(testing_session_local)

    with TestClient(app) as client:
        response = client.post(
            "/api/v1/orders",
            json=_order_payload(
                [{"product_id": ids["croissant"], "quantity": 1}, {"product_id": ids["baguette"], "quantity": 1}],
                "2025-12-17",
            ),
        )

    assert response.status_code == 400
    assert response.json()["detail"]["earliest_pickup_date"] == "2025-12-19"
    with testing_session_local() as db:
        assert db.query(Order).count() == 0


def test_order_on_closed_day_is_rejected(tmp_path: Path, monkeypatch) -> None:
    testing_session_local = _use_test_db(tmp_path, monkeypatch, "test_order_closed_day.db")
    ids = _seed_catalog(testing_session_local)

    with TestClient(app) as client:
        client.put("/api/v1/calendar/overrides/2025-12-18", json={"is_closed": True, "reason": "Inventaire"})
        response = client.post(
            "/api/v1/orders",
            json=_order_payload([{"product_id": ids["croissant"], "quantity": 1}], "2025-12-18"),
        )

    assert response.status_code == 400
    assert response.json()["detail"]["earliest_pickup_date"] == "2025-12-17"


def test_cutoff_extension_accepts_early_bread_order(tmp_path: Path, monkeypatch) -> None:
    testing_session_local = _use_test_db(tmp_path, monkeypatch, "test_order_cutoff.db")
    ids = _seed_catalog(testing_session_local)

    with TestClient(app) as client:
        client.put(
            "/api/v1/calendar/overrides/2025-12-17",
            json={"is_closed": False, "open_time": "07:00", "close_time": "12:00", "cutoff_date": "2025-12-16"},
        )
        inside_hours = client.post(
            "/api/v1/orders",
            json=_order_payload([{"product_id": ids["baguette"], "quantity": 2}], "2025-12-17", "11:30"),
        )
        outside_hours = client.post(
            "/api/v1/orders",
            json=_order_payload([{"product_id": ids["baguette"], "quantity": 2}], "2025-12-17", "15:00"),
        )

    assert inside_hours.status_code == 201
    assert outside_hours.status_code == 400
    assert "07:00" in outside_hours.json()["detail"]


def test_invalid_orders_are_rejected(tmp_path: Path, monkeypatch) -> None:
    testing_session_local = _use_test_db(tmp_path, monkeypatch, "test_order_invalid.db")
    ids = _seed_catalog(testing_session_local)
    croissant = [{"product_id": ids["croissant"], "quantity": 1}]

    with TestClient(app) as client:
        bad_phone = client.post("/api/v1/orders", json=_order_payload(croissant, "2025-12-17", customer_phone="123"))
        empty_cart = client.post("/api/v1/orders", json=_order_payload([], "2025-12-17"))
        retired = client.post(
            "/api/v1/orders",
            json=_order_payload([{"product_id": ids["retired"], "quantity": 1}], "2025-12-17"),
        )
        half_croissant = client.post(
            "/api/v1/orders",
            json=_order_payload([{"product_id": ids["croissant"], "quantity": "0.5"}], "2025-12-17"),
        )
        today = client.post("/api/v1/orders", json=_order_payload(croissant, "2025-12-16"))
        after_close = client.post("/api/v1/orders", json=_order_payload(croissant, "2025-12-17", "19:30"))
        zero_quantity = client.post(
            "/api/v1/orders",
            json=_order_payload([{"product_id": ids["croissant"], "quantity": 0}], "2025-12-17"),
        )

    assert bad_phone.status_code == 400
    assert empty_cart.status_code == 400
    assert retired.status_code == 400
    assert half_croissant.status_code == 400
    assert today.status_code == 400
    assert after_close.status_code == 400
    assert zero_quantity.status_code == 422
    with testing_session_local() as db:
        assert db.query(Order).count() == 0


def test_back_office_status_update_and_filters(tmp_path: Path, monkeypatch) -> None:
    testing_session_local = _use_test_db(tmp_path, monkeypatch, "test_order_admin.db")
    ids = _seed_catalog(testing_session_local)

    with TestClient(app) as client:
        created = client.post(
            "/api/v1/orders",
            json=_order_payload([{"product_id": ids["croissant"], "quantity": 4}], "2025-12-17"),
        )
        order_id = created.json()["id"]
        statuses = client.get("/api/v1/orders/statuses")
        ready = client.patch(f"/api/v1/orders/{order_id}", json={"status": "Prête", "staff_comment": "Sac kraft"})
        unknown = client.patch(f"/api/v1/orders/{order_id}", json={"status": "Perdue"})
        fetched = client.get(f"/api/v1/orders/{order_id}")
        by_date = client.get("/api/v1/orders", params={"pickup_date": "2025-12-17"})
        by_other_date = client.get("/api/v1/orders", params={"pickup_date": "2025-12-18"})
        by_status = client.get("/api/v1/orders", params={"status": "Prête"})
        missing = client.get("/api/v1/orders/999")

    assert [row["name"] for row in statuses.json()][:2] == ["A préparer", "Prête"]
    assert ready.status_code == 200
    assert ready.json()["status"] == "Prête"
    assert unknown.status_code == 400
    assert fetched.json()["staff_comment"] == "Sac kraft"
    assert fetched.json()["status"] == "Prête"
    assert len(by_date.json()) == 1
    assert by_other_date.json() == []
    assert [row["id"] for row in by_status.json()] == [order_id]
    assert missing.status_code == 404


def test_order_statuses_are_appended(tmp_path: Path, monkeypatch) -> None:
    _use_test_db(tmp_path, monkeypatch, "test_order_statuses.db")

    with TestClient(app) as client:
        created = client.post("/api/v1/orders/statuses", json={"name": "En attente client", "color": "#A78BFA"})
        duplicate = client.post("/api/v1/orders/statuses", json={"name": "En attente client"})
        bad_color = client.post("/api/v1/orders/statuses", json={"name": "Rose", "color": "pink"})
        listing = client.get("/api/v1/orders/statuses")

    assert created.status_code == 201
    assert duplicate.status_code == 409
    assert bad_color.status_code == 422
    assert listing.json()[-1]["name"] == "En attente client"
    assert listing.json()[-1]["sort_order"] == len(listing.json())


def test_production_report_excludes_cancelled_orders(tmp_path: Path, monkeypatch) -> None:
    testing_session_local = _use_test_db(tmp_path, monkeypatch, "test_production.db")
    ids = _seed_catalog(testing_session_local)

    with TestClient(app) as client:
        client.post(
            "/api/v1/orders",
            json=_order_payload(
                [{"product_id": ids["baguette"], "quantity": 2}, {"product_id": ids["seigle"], "quantity": "1.5"}],
                "2025-12-19",
            ),
        )
        client.post(
            "/api/v1/orders",
            json=_order_payload([{"product_id": ids["baguette"], "quantity": 5}], "2025-12-19", customer_name="Martin"),
        )
        cancelled = client.post(
            "/api/v1/orders",
            json=_order_payload([{"product_id": ids["baguette"], "quantity": 10}], "2025-12-19", customer_name="Roux"),
        )
        client.patch(f"/api/v1/orders/{cancelled.json()['id']}", json={"status": "Annulée"})
        report = client.get("/api/v1/orders/production", params={"pickup_date": "2025-12-19"})

    assert report.status_code == 200
    totals = {row["product_name"]: Decimal(row["total_quantity"]) for row in report.json()}
    assert totals == {"Baguette": Decimal("7"), "Seigle": Decimal("1.5")}
    assert all(row["pickup_date"] == date(2025, 12, 19).isoformat() for row in report.json())


def _insert_order(testing_session_local: sessionmaker, order_number: str, **fields) -> None:
    values = {
        "customer_name": "Dupont",
        "customer_phone": "0612345678",
        "pickup_date": date(2025, 12, 17),
        "pickup_time": time(10, 0),
        "status": "A préparer",
        "created_date": NOW.date(),
    }
    values.update(fields)
    with testing_session_local() as db:
        db.add(Order(order_number=order_number, **values))
        db.commit()


def test_order_patch_rejects_null_for_required_fields(tmp_path: Path, monkeypatch) -> None:
    testing_session_local = _use_test_db(tmp_path, monkeypatch, "test_order_patch_null.db")
    ids = _seed_catalog(testing_session_local)

    with TestClient(app) as client:
        created = client.post(
            "/api/v1/orders",
            json=_order_payload([{"product_id": ids["croissant"], "quantity": 1}], "2025-12-17"),
        )
        order_id = created.json()["id"]
        client.patch(f"/api/v1/orders/{order_id}", json={"staff_comment": "Sans sac"})
        null_status = client.patch(f"/api/v1/orders/{order_id}", json={"status": None})
        null_date = client.patch(f"/api/v1/orders/{order_id}", json={"pickup_date": None})
        null_time = client.patch(f"/api/v1/orders/{order_id}", json={"pickup_time": None})
        cleared_comment = client.patch(f"/api/v1/orders/{order_id}", json={"staff_comment": None})

    assert null_status.status_code == 422
    assert null_date.status_code == 422
    assert null_time.status_code == 422
    assert cleared_comment.status_code == 200
    assert cleared_comment.json()["staff_comment"] is None
    assert cleared_comment.json()["status"] == "A préparer"
    assert cleared_comment.json()["pickup_date"] == "2025-12-17"


def test_daily_counter_keeps_growing_past_999(tmp_path: Path, monkeypatch) -> None:
    testing_session_local = _use_test_db(tmp_path, monkeypatch, "test_order_counter.db")
    ids = _seed_catalog(testing_session_local)
    _insert_order(testing_session_local, "MAR251216999", customer_name="Martin")
    _insert_order(testing_session_local, "ROU2512161000", customer_name="Roux")
    _insert_order(testing_session_local, "DUP251215042", created_date=date(2025, 12, 15))

    with testing_session_local() as db:
        assert next_daily_increment(db, NOW.date()) == 1001
        assert next_daily_increment(db, date(2025, 12, 15)) == 43
        assert next_daily_increment(db, date(2025, 12, 14)) == 1

    with TestClient(app) as client:
        response = client.post(
            "/api/v1/orders",
            json=_order_payload([{"product_id": ids["croissant"], "quantity": 1}], "2025-12-17"),
        )

    assert response.status_code == 201
    assert response.json()["order_number"] == "DUP2512161001"


def test_order_number_collision_is_retried(tmp_path: Path, monkeypatch) -> None:
    testing_session_local = _use_test_db(tmp_path, monkeypatch, "test_order_collision.db")
    ids = _seed_catalog(testing_session_local)
    _insert_order(testing_session_local, "DUP251216001")
    # first read is stale, as if another request committed in between
    counters = iter([1, 2])
    monkeypatch.setattr("farine.services.order_service.next_daily_increment", lambda db, created_date: next(counters))

    with TestClient(app) as client:
        response = client.post(
            "/api/v1/orders",
            json=_order_payload([{"product_id": ids["croissant"], "quantity": 2}], "2025-12-17"),
        )

    assert response.status_code == 201
    assert response.json()["order_number"] == "DUP251216002"
    assert len(response.json()["items"]) == 1
    with testing_session_local() as db:
        assert db.query(Order).count() == 2


def test_delete_order_removes_its_lines(tmp_path: Path, monkeypatch) -> None:
    testing_session_local = _use_test_db(tmp_path, monkeypatch, "test_order_delete.db")
    ids = _seed_catalog(testing_session_local)

    with TestClient(app) as client:
        created = client.post(
            "/api/v1/orders",
            json=_order_payload([{"product_id": ids["croissant"], "quantity": 2}], "2025-12-17"),
        )
        order_id = created.json()["id"]
        deleted = client.delete(f"/api/v1/orders/{order_id}")
        deleted_again = client.delete(f"/api/v1/orders/{order_id}")
        fetched = client.get(f"/api/v1/orders/{order_id}")

    assert deleted.status_code == 204
    assert deleted_again.status_code == 404
    assert fetched.status_code == 404
    with testing_session_local() as db:
        assert db.query(Order).count() == 0
        assert db.query(OrderItem).count() == 0


def test_deleted_product_keeps_order_line_snapshot(tmp_path: Path, monkeypatch) -> None:
    testing_session_local = _use_test_db(tmp_path, monkeypatch, "test_product_delete_snapshot.db")
    ids = _seed_catalog(testing_session_local)

    with TestClient(app) as client:
        created = client.post(
            "/api/v1/orders",
            json=_order_payload([{"product_id": ids["croissant"], "quantity": 2}], "2025-12-17"),
        )
        deleted = client.delete(f"/api/v1/catalog/products/{ids['croissant']}")
        fetched = client.get(f"/api/v1/orders/{created.json()['id']}")

    assert deleted.status_code == 204
    line = fetched.json()["items"][0]
    assert line["product_id"] is None
    assert line["product_name"] == "Croissant"
    assert Decimal(line["subtotal_ttc"]) == Decimal("2.70")


def test_dashboard_counts_orders_products_and_revenue(tmp_path: Path, monkeypatch) -> None:
    testing_session_local = _use_test_db(tmp_path, monkeypatch, "test_dashboard.db")
    ids = _seed_catalog(testing_session_local)
    _insert_order(testing_session_local, "OLD251210001", created_date=date(2025, 12, 10), total_ttc=Decimal("50.00"))

    with TestClient(app) as client:
        client.post(
            "/api/v1/orders",
            json=_order_payload([{"product_id": ids["croissant"], "quantity": 2}], "2025-12-17"),
        )
        second = client.post(
            "/api/v1/orders",
            json=_order_payload([{"product_id": ids["baguette"], "quantity": 3}], "2025-12-19"),
        )
        client.patch(f"/api/v1/orders/{second.json()['id']}", json={"status": "Prête"})
        response = client.get("/api/v1/orders/dashboard")

    assert response.status_code == 200
    stats = response.json()
    assert stats["total_orders"] == 3
    assert stats["pending_orders"] == 2
    assert stats["active_products"] == 3
    assert Decimal(stats["today_revenue"]) == Decimal("6.30")


def test_status_edit_toggle_and_delete(tmp_path: Path, monkeypatch) -> None:
    testing_session_local = _use_test_db(tmp_path, monkeypatch, "test_status_edit.db")
    ids = _seed_catalog(testing_session_local)

    with TestClient(app) as client:
        statuses = {row["name"]: row["id"] for row in client.get("/api/v1/orders/statuses").json()}
        created = client.post(
            "/api/v1/orders",
            json=_order_payload([{"product_id": ids["croissant"], "quantity": 1}], "2025-12-17"),
        )
        order_id = created.json()["id"]
        client.patch(f"/api/v1/orders/{order_id}", json={"status": "Prête"})

        renamed = client.patch(
            f"/api/v1/orders/statuses/{statuses['Prête']}",
            json={"name": "Prête à retirer", "color": "#10B981"},
        )
        order_after_rename = client.get(f"/api/v1/orders/{order_id}")
        toggled = client.patch(f"/api/v1/orders/statuses/{statuses['Récupérée']}", json={"is_active": False})
        active_names = [row["name"] for row in client.get("/api/v1/orders/statuses", params={"active_only": True}).json()]
        builtin_rename = client.patch(f"/api/v1/orders/statuses/{statuses['A préparer']}", json={"name": "Nouvelle"})
        clash = client.patch(f"/api/v1/orders/statuses/{statuses['Récupérée']}", json={"name": "Annulée"})
        null_name = client.patch(f"/api/v1/orders/statuses/{statuses['Récupérée']}", json={"name": None})
        in_use = client.delete(f"/api/v1/orders/statuses/{statuses['Prête']}")
        builtin_delete = client.delete(f"/api/v1/orders/statuses/{statuses['Annulée']}")
        unused = client.delete(f"/api/v1/orders/statuses/{statuses['Récupérée']}")
        missing = client.delete(f"/api/v1/orders/statuses/{statuses['Récupérée']}")

    assert renamed.status_code == 200
    assert renamed.json()["name"] == "Prête à retirer"
    assert renamed.json()["color"] == "#10B981"
    assert order_after_rename.json()["status"] == "Prête à retirer"
    assert toggled.json()["is_active"] is False
    assert "Récupérée" not in active_names
    assert builtin_rename.status_code == 409
    assert clash.status_code == 409
    assert null_name.status_code == 422
    assert in_use.status_code == 409
    assert builtin_delete.status_code == 409
    assert unused.status_code == 204
    assert missing.status_code == 404
