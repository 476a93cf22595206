# Insert Reference Stores & Employees
from sqlmodel import Session
from db.session import create_db_and_tables, engine
from models.employee import Employee
from models.store import Store

SEED_STORES = [
    Store(id="1", name="Taipei Main", latitude=25.0330, longitude=121.5654,
          address="No. 7, Sec. 5, Xinyi Rd., Xinyi Dist., Taipei"),
    Store(id="2", name="Taipei Branch", latitude=25.0478, longitude=121.5170,
          address="No. 48, Sec. 2, Zhongshan N. Rd., Zhongshan Dist., Taipei"),
    Store(id="3", name="Taichung Branch", latitude=24.1477, longitude=120.6736,
          address="No. 99, Sec. 3, Taiwan Blvd., Xitun Dist., Taichung"),
    Store(id="4", name="Kaohsiung Branch", latitude=22.6203, longitude=120.3133,
          address="No. 25, Zhongzheng 3rd Rd., Xinxing Dist., Kaohsiung"),
]

SEED_EMPLOYEES = [
    Employee(id="1", name="Manager Wang", store_id="1", position="store manager"),
    Employee(id="2", name="Assistant Li", store_id="1", position="staff"),
    Employee(id="3", name="Manager Zhang", store_id="2", position="store manager"),
    Employee(id="4", name="Chen", store_id="2", position="intern"),
]


def seed_reference_data(bind=None):
    bind = bind or engine
    create_db_and_tables(bind)

    with Session(bind) as session:
        # Check if rows already exist to avoid duplicates
        for store in SEED_STORES:
            if session.get(Store, store.id):
                print(f"Store {store.id} already exists")
                continue
            session.add(Store.model_validate(store.model_dump()))
            print(f"Added store {store.name}")

        for employee in SEED_EMPLOYEES:
            if session.get(Employee, employee.id):
                print(f"Employee {employee.id} already exists")
                continue
            session.add(Employee.model_validate(employee.model_dump()))
            print(f"Added employee {employee.name}")

        session.commit()


if __name__ == "__main__":
    seed_reference_data()
