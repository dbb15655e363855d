from coffeebeat.models.table import Table

LOCATIONS = ('Main Hall', 'Outdoor', 'Private Room')

TABLES = (
    Table(id=1, number='T1', capacity=4, location='Main Hall'),
    Table(id=2, number='T2', capacity=4, location='Main Hall'),
    Table(id=3, number='T3', capacity=2, location='Main Hall'),
    Table(id=4, number='T4', capacity=6, location='Main Hall'),
    Table(id=5, number='T5', capacity=4, location='Outdoor'),
    Table(id=6, number='T6', capacity=2, location='Outdoor'),
    Table(id=7, number='T7', capacity=8, location='Private Room'),
    Table(id=8, number='T8', capacity=4, location='Private Room'),
)

class TableRegistry:

    @staticmethod
    def all_tables():
        return list(TABLES)

    @staticmethod
    def get_table(number):
        """Look a table up by its number ("T3"), case insensitive."""
        if number is None:
            return None
        wanted = str(number).strip().upper()
        for table in TABLES:
            if table.number == wanted:
                return table
        return None

    @staticmethod
    def get_table_by_id(table_id):
        for table in TABLES:
            if table.id == table_id:
                return table
        return None

    @staticmethod
    def tables_by_location(location):
        return [t for t in TABLES if t.location.lower() == location.lower()]

    @staticmethod
    def tables_for_party(people_count: int):
        """Tables that seat the party, best fit first."""
        fitting = [t for t in TABLES if t.capacity >= people_count]
        fitting.sort(key=lambda t: (t.capacity, t.id))
        return fitting
