from coffeebeat.extensions import db
from datetime import datetime

class LocalEntry(db.Model):
    __tablename__ = 'local_entries'

    key = db.Column(db.String(64), primary_key=True)
    value = db.Column(db.Text, nullable=False) # JSON document

    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            'key': self.key,
            'value': self.value,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None
        }
