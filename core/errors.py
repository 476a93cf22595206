# Hard failures raised by the attendance engine. Business rejections
# (geofence violations, device anomalies) are returned as data instead.


class AttendanceError(Exception):
    code = "ATTENDANCE_ERROR"

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class EmployeeNotFound(AttendanceError):
    code = "EMPLOYEE_NOT_FOUND"

    def __init__(self, employee_id: str):
        super().__init__(f"Employee {employee_id} not found.")
        self.employee_id = employee_id


class StoreNotFound(AttendanceError):
    code = "STORE_NOT_FOUND"

    def __init__(self, store_id: str):
        super().__init__(f"Store {store_id} not found.")
        self.store_id = store_id


class AttendanceSystemError(AttendanceError):
    code = "SYSTEM_ERROR"


# Not raised; used as the code on rejected check-in results
GEOFENCE_VIOLATION = "GEOFENCE_VIOLATION"
