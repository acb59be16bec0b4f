from sqlalchemy import Column, DateTime, Enum, Float, ForeignKey, Index, Integer, Table, Text, UniqueConstraint, text

from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()
metadata = Base.metadata


BOOKING_STATUSES = ('pending', 'confirmed', 'cancelled', 'no_show')


class Salons(Base):
    __tablename__ = 'salons'

    name = Column(Text, nullable=False)
    id = Column(Integer, primary_key=True)
    slug = Column(Text, unique=True)
    is_active = Column(Integer, nullable=False, server_default=text('1'))
    created_at = Column(DateTime, server_default=text('CURRENT_TIMESTAMP'))

    services = relationship('Services', back_populates='salon')
    staff = relationship('Staff', back_populates='salon')
    hours = relationship('SalonHours', back_populates='salon')


class Services(Base):
    __tablename__ = 'services'

    salon_id = Column(ForeignKey('salons.id', ondelete='CASCADE'), nullable=False)
    name = Column(Text, nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    id = Column(Integer, primary_key=True)
    price = Column(Float)
    is_active = Column(Integer, nullable=False, server_default=text('1'))

    salon = relationship('Salons', back_populates='services')
    bookings = relationship('Bookings', back_populates='service')


class Staff(Base):
    __tablename__ = 'staff'

    salon_id = Column(ForeignKey('salons.id', ondelete='CASCADE'), nullable=False)
    display_name = Column(Text, nullable=False)
    id = Column(Integer, primary_key=True)
    is_active = Column(Integer, nullable=False, server_default=text('1'))
    created_at = Column(DateTime, server_default=text('CURRENT_TIMESTAMP'))

    salon = relationship('Salons', back_populates='staff')
    hours = relationship('EmployeeHours', back_populates='staff')
    time_off = relationship('EmployeeTimeOff', back_populates='staff')
    bookings = relationship('Bookings', back_populates='staff')


t_staff_services = Table(
    'staff_services', metadata,
    Column('staff_id', ForeignKey('staff.id', ondelete='CASCADE'), primary_key=True),
    Column('service_id', ForeignKey('services.id', ondelete='CASCADE'), primary_key=True),
    Column('is_active', Integer, nullable=False, server_default=text('1'))
)


class SalonHours(Base):
    __tablename__ = 'salon_hours'
    __table_args__ = (
        UniqueConstraint('salon_id', 'day_of_week'),
    )

    salon_id = Column(ForeignKey('salons.id', ondelete='CASCADE'), nullable=False)
    day_of_week = Column(Integer, nullable=False)  # 0 = Sunday .. 6 = Saturday
    id = Column(Integer, primary_key=True)
    open_time = Column(Text)   # "HH:MM"
    close_time = Column(Text)  # "HH:MM"
    is_closed = Column(Integer, nullable=False, server_default=text('0'))

    salon = relationship('Salons', back_populates='hours')


class EmployeeHours(Base):
    __tablename__ = 'employee_hours'

    salon_id = Column(ForeignKey('salons.id', ondelete='CASCADE'), nullable=False)
    staff_id = Column(ForeignKey('staff.id', ondelete='CASCADE'), nullable=False)
    day_of_week = Column(Integer, nullable=False)
    id = Column(Integer, primary_key=True)
    start_time = Column(Text)
    end_time = Column(Text)
    is_off = Column(Integer, nullable=False, server_default=text('0'))
    break_start = Column(Text)
    break_end = Column(Text)

    staff = relationship('Staff', back_populates='hours')


class EmployeeTimeOff(Base):
    __tablename__ = 'employee_time_off'
    __table_args__ = (
        Index('ix_employee_time_off_staff_range', 'staff_id', 'start_at', 'end_at'),
    )

    salon_id = Column(ForeignKey('salons.id', ondelete='CASCADE'), nullable=False)
    staff_id = Column(ForeignKey('staff.id', ondelete='CASCADE'), nullable=False)
    start_at = Column(DateTime, nullable=False)
    end_at = Column(DateTime, nullable=False)
    id = Column(Integer, primary_key=True)
    reason = Column(Text)

    staff = relationship('Staff', back_populates='time_off')


class Bookings(Base):
    __tablename__ = 'bookings'
    __table_args__ = (
        Index('ix_bookings_staff_range', 'staff_id', 'appointment_start', 'appointment_end'),
    )

    salon_id = Column(ForeignKey('salons.id', ondelete='CASCADE'), nullable=False)
    staff_id = Column(ForeignKey('staff.id', ondelete='RESTRICT'), nullable=False)
    service_id = Column(ForeignKey('services.id', ondelete='RESTRICT'), nullable=False)
    customer_name = Column(Text, nullable=False)
    appointment_start = Column(DateTime, nullable=False)
    appointment_end = Column(DateTime, nullable=False)
    status = Column(Enum(*BOOKING_STATUSES, name='booking_status'), nullable=False, server_default=text("'pending'"))
    id = Column(Integer, primary_key=True)
    customer_phone = Column(Text)
    notes = Column(Text)
    created_at = Column(DateTime, server_default=text('CURRENT_TIMESTAMP'))
    updated_at = Column(DateTime, server_default=text('CURRENT_TIMESTAMP'))

    staff = relationship('Staff', back_populates='bookings')
    service = relationship('Services', back_populates='bookings')
