"""Flask web interface for the Finance Tracker."""

from __future__ import annotations

import datetime as dt
import io
import sqlite3
from functools import wraps
from typing import Dict, List, Optional, Tuple

from flask import (
    Flask,
    Response,
    current_app,
    flash,
    g,
    jsonify,
    redirect,
    render_template,
    request,
    session,
    url_for,
)
from werkzeug.security import check_password_hash, generate_password_hash

from .aggregation import Period, build_month_summary, month_period, parse_month
from .config import PACKAGE_ROOT, AppConfig
from .db import close_db, get_db, init_db
from .errors import DataIntegrityError, RetrievalFailed, ValidationFailed, WriteFailed
from .logging_setup import configure_logging, get_logger
from .models import TransactionType
from .reports import (
    balance_tone,
    chart_data,
    export_summary_csv,
    format_currency,
    summary_to_dict,
    transactions_to_list,
)
from .retrieval import LatestResponseGate, TransactionFilters, fetch_period, fetch_transactions
from .store import (
    create_transaction,
    create_user,
    delete_transaction,
    find_user_by_email,
    find_user_by_id,
    get_transaction,
    update_transaction,
)
from .validation import validate_transaction_form

logger = get_logger("finance_tracker.webapp")

_GATES_KEY = "finance_tracker.gates"

EMPTY_FORM = {
    "description": "",
    "amount": "",
    "date": "",
    "type": "",
    "category": "",
    "payment_method": "",
}


def login_required(view):
    @wraps(view)
    def wrapped_view(**kwargs):
        if g.user is None:
            return redirect(url_for("login"))
        return view(**kwargs)

    return wrapped_view


def _load_logged_in_user() -> None:
    user_id = session.get("user_id")
    if user_id is None:
        g.user = None
        return
    g.user = find_user_by_id(get_db(), user_id)


def current_owner_id() -> Optional[str]:
    user = g.get("user")
    return str(user["id"]) if user is not None else None


def _selected_period(value: Optional[str]) -> Period:
    if value:
        try:
            return parse_month(value)
        except ValueError:
            pass
    return month_period(dt.date.today())


def _response_gate(owner_id: str, stream: str) -> LatestResponseGate:
    # One gate per client stream (a page load or API client), not per owner.
    gates: Dict[Tuple[str, str], LatestResponseGate] = current_app.extensions.setdefault(_GATES_KEY, {})
    return gates.setdefault((owner_id, stream), LatestResponseGate())


def _form_from_request() -> Dict[str, str]:
    return {key: (request.form.get(key) or "").strip() for key in EMPTY_FORM}


def _redirect_to_transactions(filters: TransactionFilters):
    return redirect(url_for("transactions", **filters.as_query_args()))


def create_app(config: Optional[AppConfig] = None, overrides: Optional[Dict] = None) -> Flask:
    cfg = config or AppConfig.load()
    app = Flask(
        __name__,
        template_folder=str(PACKAGE_ROOT / "templates"),
        static_folder=str(PACKAGE_ROOT / "static"),
    )
    app.config["SECRET_KEY"] = cfg.secret_key
    app.config["DATABASE"] = cfg.database
    app.config["APP_CONFIG"] = cfg
    if overrides:
        app.config.update(overrides)

    if not app.testing:
        configure_logging(cfg.log_level)

    app.teardown_appcontext(close_db)
    app.before_request(_load_logged_in_user)
    with app.app_context():
        init_db()

    @app.template_filter("currency")
    def currency_filter(amount):
        return format_currency(amount, cfg.currency_symbol)

    @app.context_processor
    def inject_labels():
        return {
            "type_labels": cfg.type_labels,
            "transaction_types": TransactionType.values(),
            "user": g.get("user"),
        }

    @app.route("/signup", methods=["GET", "POST"])
    def signup():
        if g.user is not None:
            return redirect(url_for("index"))
        errors: List[str] = []
        form = {"email": ""}
        if request.method == "POST":
            email = (request.form.get("email") or "").strip().lower()
            password = request.form.get("password") or ""
            form["email"] = email
            if not email:
                errors.append("Email is required.")
            if not password:
                errors.append("Password is required.")
            if not errors:
                db = get_db()
                try:
                    user_id = create_user(db, email, generate_password_hash(password))
                except sqlite3.IntegrityError:
                    db.rollback()
                    errors.append("An account with that email already exists.")
                else:
                    logger.info("New user %s signed up", user_id)
                    session.clear()
                    session["user_id"] = user_id
                    return redirect(url_for("index"))
        return render_template("auth.html", mode="signup", errors=errors, form=form)

    @app.route("/login", methods=["GET", "POST"])
    def login():
        if g.user is not None:
            return redirect(url_for("index"))
        errors: List[str] = []
        form = {"email": ""}
        if request.method == "POST":
            email = (request.form.get("email") or "").strip().lower()
            password = request.form.get("password") or ""
            form["email"] = email
            user = find_user_by_email(get_db(), email)
            if user is None or not check_password_hash(user["password_hash"], password):
                logger.warning("Failed login for %s", email or "<empty>")
                errors.append("Invalid credentials.")
            else:
                session.clear()
                session["user_id"] = str(user["id"])
                return redirect(url_for("index"))
        return render_template("auth.html", mode="login", errors=errors, form=form)

    @app.route("/logout", methods=["POST"])
    @login_required
    def logout():
        session.clear()
        return redirect(url_for("login"))

    @app.route("/")
    @login_required
    def index():
        return redirect(url_for("dashboard"))

    @app.route("/dashboard")
    @login_required
    def dashboard():
        period = _selected_period(request.args.get("month"))
        summary = None
        load_error = None
        try:
            txns = fetch_period(get_db(), current_owner_id(), period.start, period.end)
            summary = build_month_summary(txns, period)
        except (RetrievalFailed, DataIntegrityError) as exc:
            load_error = str(exc)
        return render_template(
            "dashboard.html",
            period=period,
            summary=summary,
            load_error=load_error,
            balance_tone=balance_tone(summary.balance) if summary else "neutral",
            chart=chart_data(summary) if summary else None,
            month_value=f"{period.start.year:04d}-{period.start.month:02d}",
        )

    @app.route("/dashboard/export.csv")
    @login_required
    def dashboard_export():
        period = _selected_period(request.args.get("month"))
        try:
            txns = fetch_period(get_db(), current_owner_id(), period.start, period.end)
            summary = build_month_summary(txns, period)
        except (RetrievalFailed, DataIntegrityError) as exc:
            return Response(str(exc), status=502, mimetype="text/plain")
        buffer = io.StringIO()
        export_summary_csv(summary, buffer)
        filename = f"summary-{period.start.year:04d}-{period.start.month:02d}.csv"
        return Response(
            buffer.getvalue(),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/transactions", methods=["GET", "POST"])
    @login_required
    def transactions():
        owner_id = current_owner_id()
        filters = TransactionFilters.from_mapping(request.args)
        errors: List[str] = []
        form = dict(EMPTY_FORM, date=dt.date.today().isoformat())
        form_mode = "add"
        edit_id: Optional[str] = None

        if request.method == "POST":
            action = request.form.get("action", "")
            db = get_db()
            if action in {"create", "update"}:
                form = _form_from_request()
                edit_id = request.form.get("transaction_id") or None
                form_mode = "edit" if action == "update" else "add"
                try:
                    data = validate_transaction_form(form)
                    if action == "create":
                        create_transaction(db, owner_id, data)
                    else:
                        if not edit_id:
                            raise WriteFailed("Unable to update the selected transaction.")
                        update_transaction(db, owner_id, edit_id, data)
                except ValidationFailed as exc:
                    errors.extend(exc.errors)
                except WriteFailed as exc:
                    errors.append(f"Could not save the transaction: {exc}")
                else:
                    flash("Transaction created." if action == "create" else "Transaction updated.", "success")
                    return _redirect_to_transactions(filters)
            elif action == "delete":
                target_id = request.form.get("transaction_id") or ""
                try:
                    delete_transaction(db, owner_id, target_id)
                except WriteFailed as exc:
                    errors.append(f"Could not delete the transaction: {exc}")
                else:
                    flash("Transaction deleted.", "success")
                    return _redirect_to_transactions(filters)
            else:
                errors.append("Unknown action.")
        elif request.args.get("edit"):
            existing = get_transaction(get_db(), owner_id, request.args["edit"])
            if existing is None:
                errors.append("Unable to find the selected transaction.")
            else:
                form = {
                    "description": existing.description,
                    "amount": f"{existing.amount:.2f}",
                    "date": existing.date,
                    "type": existing.type,
                    "category": existing.category or "",
                    "payment_method": existing.payment_method or "",
                }
                form_mode = "edit"
                edit_id = existing.id

        rows = []
        load_error = None
        try:
            rows = fetch_transactions(get_db(), owner_id, filters)
        except RetrievalFailed as exc:
            load_error = str(exc)

        return render_template(
            "transactions.html",
            filters=filters,
            filter_args=filters.as_query_args(),
            transactions=rows,
            load_error=load_error,
            errors=errors,
            form=form,
            form_mode=form_mode,
            edit_id=edit_id,
        )

    @app.route("/api/transactions")
    def api_transactions():
        owner_id = current_owner_id()
        filters = TransactionFilters.from_mapping(request.args)
        request_id = request.args.get("request_id", type=int)
        stream = request.args.get("stream", "")
        restart = request.args.get("restart", type=int) == 1
        gate = _response_gate(owner_id, stream) if owner_id and request_id is not None else None
        if gate is not None:
            gate.begin(request_id, restart=restart)
        try:
            rows = fetch_transactions(get_db(), owner_id, filters)
        except RetrievalFailed as exc:
            return jsonify({"error": str(exc), "request_id": request_id}), 502
        payload = {
            "transactions": transactions_to_list(rows),
            "filters": filters.as_query_args(),
            "request_id": request_id,
            "stale": gate is not None and not gate.accept(request_id),
        }
        return jsonify(payload)

    @app.route("/api/summary")
    def api_summary():
        period = _selected_period(request.args.get("month"))
        try:
            txns = fetch_period(get_db(), current_owner_id(), period.start, period.end)
            summary = build_month_summary(txns, period)
        except RetrievalFailed as exc:
            return jsonify({"error": str(exc)}), 502
        except DataIntegrityError as exc:
            return jsonify({"error": str(exc)}), 500
        payload = summary_to_dict(summary)
        payload["balance_tone"] = balance_tone(summary.balance)
        return jsonify(payload)

    return app


if __name__ == "__main__":
    create_app().run(debug=True)
