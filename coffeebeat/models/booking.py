from coffeebeat.extensions import db
from datetime import datetime

class Booking(db.Model):
    """Local mirror of a backend booking record."""
    __tablename__ = 'bookings'

    id = db.Column(db.String(64), primary_key=True)
    user_id = db.Column(db.String(64), index=True)
    table_number = db.Column(db.String(16), index=True)
    people_count = db.Column(db.Integer, default=1)

    # ISO timestamp, or MORNING/AFTERNOON/EVENING together with booking_date
    time_slot = db.Column(db.String(64))
    booking_date = db.Column(db.String(32))

    status = db.Column(db.String(20), default='BOOKED')
    customer_name = db.Column(db.String(128))
    customer_email = db.Column(db.String(128))
    customer_phone = db.Column(db.String(32))
    special_requests = db.Column(db.Text)
    created_at = db.Column(db.String(64))

    # sequence number of the last store event applied to this row
    local_seq = db.Column(db.Integer, default=0)
    synced_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    API_FIELDS = {
        'userId': 'user_id',
        'tableNumber': 'table_number',
        'peopleCount': 'people_count',
        'timeSlot': 'time_slot',
        'bookingDate': 'booking_date',
        'status': 'status',
        'customerName': 'customer_name',
        'customerEmail': 'customer_email',
        'customerPhone': 'customer_phone',
        'specialRequests': 'special_requests',
        'createdAt': 'created_at',
    }

    @classmethod
    def from_api(cls, data):
        booking = cls(id=str(data['id']))
        booking.update_from_api(data)
        return booking

    def update_from_api(self, data):
        for api_name, attr in self.API_FIELDS.items():
            if api_name in data:
                setattr(self, attr, data[api_name])
        # the legacy booking form sends the coarse slot separately
        if data.get('bookingTimeSlot'):
            self.time_slot = data['bookingTimeSlot']
        if self.table_number is not None:
            self.table_number = str(self.table_number)
        if self.status:
            self.status = self.status.upper()
        return self

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'tableNumber': self.table_number,
            'peopleCount': self.people_count,
            'timeSlot': self.time_slot,
            'bookingDate': self.booking_date,
            'status': self.status,
            'customerName': self.customer_name,
            'customerEmail': self.customer_email,
            'customerPhone': self.customer_phone,
            'specialRequests': self.special_requests,
            'createdAt': self.created_at
        }
