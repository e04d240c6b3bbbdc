# accounts/constants.py


class UserRole:
    ADMIN = "ADMIN"
    CEO = "CEO"
    ACCOUNTANT = "ACCOUNTANT"
    STATION_MANAGER = "STATION_MANAGER"

    CHOICES = [
        (ADMIN, "Administrator"),
        (CEO, "Chief Executive"),
        (ACCOUNTANT, "Accountant"),
        (STATION_MANAGER, "Station manager"),
    ]


class StationRoles:
    """
    Roles whose visibility is limited to the station they are attached to.
    """
    SCOPED = (
        UserRole.STATION_MANAGER,
    )
