from wtforms import (StringField, TextAreaField, SelectField, BooleanField, DecimalField,
                     IntegerField, DateField, SelectMultipleField)
from wtforms.validators import DataRequired, InputRequired, Email, Length, Optional, NumberRange, Regexp, ValidationError
from gymflow.models.member import MEMBERSHIP_BASIC, MEMBERSHIP_VIP
from gymflow.models.service import Service
from gymflow.utils.common import ApiForm, TIME_PATTERN

# Turkish mobile numbers, spaces optional: 555 123 45 67, 0555..., +90 555...
PHONE_PATTERN = r'^(\+90|0)?\s*([0-9]{3})\s*([0-9]{3})\s*([0-9]{2})\s*([0-9]{2})$'
NAME_PATTERN = r'^[a-zA-ZğüşıöçĞÜŞİÖÇ\s]{2,}$'

class MemberForm(ApiForm):
    """Form for creating or updating a member"""
    first_name = StringField('First Name', validators=[DataRequired(), Length(min=2, max=50),
                                                       Regexp(NAME_PATTERN, message='Enter a valid first name')])
    last_name = StringField('Last Name', validators=[DataRequired(), Length(min=2, max=50),
                                                     Regexp(NAME_PATTERN, message='Enter a valid last name')])
    email = StringField('Email', validators=[Optional(), Email(), Length(max=120)])
    phone = StringField('Phone Number', validators=[
        DataRequired(),
        Regexp(PHONE_PATTERN, message='Enter a valid phone number (e.g. 555 123 45 67)')
    ])
    membership_type = SelectField('Membership', choices=[
        (MEMBERSHIP_BASIC, 'Basic'),
        (MEMBERSHIP_VIP, 'VIP')
    ], default=MEMBERSHIP_BASIC)
    subscribed_services = SelectMultipleField('Packages', coerce=int, choices=[], validate_choice=False)
    start_date = DateField('Start Date', validators=[DataRequired()], format='%Y-%m-%d')
    end_date = DateField('End Date', validators=[Optional()], format='%Y-%m-%d')
    notes = TextAreaField('Notes', validators=[Optional(), Length(max=1000)])
    avatar_url = StringField('Avatar', validators=[Optional(), Length(max=255)])

    def validate_subscribed_services(self, subscribed_services):
        if not subscribed_services.data:
            raise ValidationError('At least one package must be selected.')

        service_ids = set(subscribed_services.data)
        services = Service.query.filter(Service.id.in_(service_ids)).all()
        if len(services) != len(service_ids):
            raise ValidationError('Unknown package selected.')

        if self.membership_type.data != MEMBERSHIP_VIP and any(s.is_vip_only for s in services):
            raise ValidationError('VIP packages can only be selected for VIP members.')

    def validate_end_date(self, end_date):
        if end_date.data and self.start_date.data and end_date.data < self.start_date.data:
            raise ValidationError('End date cannot be before the start date.')

class TrainerForm(ApiForm):
    """Form for creating or updating a trainer"""
    first_name = StringField('First Name', validators=[DataRequired(), Length(min=2, max=50),
                                                       Regexp(NAME_PATTERN, message='Enter a valid first name')])
    last_name = StringField('Last Name', validators=[DataRequired(), Length(min=2, max=50),
                                                     Regexp(NAME_PATTERN, message='Enter a valid last name')])
    email = StringField('Email', validators=[Optional(), Email(), Length(max=120)])
    phone = StringField('Phone Number', validators=[
        DataRequired(),
        Regexp(PHONE_PATTERN, message='Enter a valid phone number (e.g. 555 123 45 67)')
    ])
    bio = TextAreaField('Bio', validators=[DataRequired(), Length(min=10, max=1000)])
    categories = SelectMultipleField('Categories', coerce=str, choices=[], validate_choice=False)
    start_date = DateField('Start Date', validators=[DataRequired()], format='%Y-%m-%d')
    working_start = StringField('Shift Start', validators=[
        DataRequired(message='Shift start is required'),
        Regexp(TIME_PATTERN, message='Time must be HH:MM')
    ])
    working_end = StringField('Shift End', validators=[
        DataRequired(message='Shift end is required'),
        Regexp(TIME_PATTERN, message='Time must be HH:MM')
    ])

    def validate_working_end(self, working_end):
        if self.working_start.data and working_end.data and working_end.data[:5] <= self.working_start.data[:5]:
            raise ValidationError('Shift must end after it starts.')

class ServiceForm(ApiForm):
    """Form for creating or updating a package"""
    name = StringField('Package Name', validators=[DataRequired(), Length(min=2, max=100)])
    description = TextAreaField('Description', validators=[DataRequired(), Length(min=10, max=500)])
    category = StringField('Category', validators=[Optional(), Length(max=50)])
    price = DecimalField('Price', validators=[
        InputRequired(),
        NumberRange(min=0, message='Price cannot be negative')
    ])
    duration_minutes = IntegerField('Duration (minutes)', validators=[
        DataRequired(),
        NumberRange(min=1, max=480, message='Duration must be between 1 and 480 minutes')
    ])
    session_count = IntegerField('Sessions', validators=[
        DataRequired(),
        NumberRange(min=1, message='A package needs at least one session')
    ])
    max_participants = IntegerField('Max Participants', validators=[
        Optional(),
        NumberRange(min=1, max=50, message='Participants must be between 1 and 50')
    ])
    is_vip_only = BooleanField('VIP Only')
    is_active = BooleanField('Active', default=True)

class TimeSlotSettingsForm(ApiForm):
    """Form for replacing one time-slot profile"""
    slots = SelectMultipleField('Slots', coerce=str, choices=[], validate_choice=False)
    working_start = StringField('Opens', validators=[DataRequired(), Regexp(TIME_PATTERN, message='Time must be HH:MM')])
    working_end = StringField('Closes', validators=[DataRequired(), Regexp(TIME_PATTERN, message='Time must be HH:MM')])

    def validate_slots(self, slots):
        if not slots.data:
            raise ValidationError('At least one slot is required.')
