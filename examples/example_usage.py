"""Example: drive the audited store directly, without Flask.

Controllers are a thin layer; everything below is what they call.
"""

import importlib

from config import get_settings_module

from src.employee_dashboard.employee_dashboard.container import build_container
from src.employee_dashboard.employee_dashboard.core.enums import Role
from src.employee_dashboard.employee_dashboard.records.model import Actor


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)

    accountant = container.store_for(Role.ACCOUNTANT)
    actor = Actor("A1", "accountant@example.com")

    created = accountant.create("bonus", {"empid": "E1", "amount": 500}, actor, id_field="bonusid")
    print(created)
    if created.ok:
        bonus_id = created.data["bonusid"]
        print(accountant.update("bonus", bonus_id, {"amount": 750}, actor, id_field="bonusid"))
        print(accountant.delete("bonus", bonus_id, actor, id_field="bonusid"))

    print(container.payroll_service.payroll_summary("2026-01"))


if __name__ == "__main__":
    main()
