from wtforms import IntegerField, StringField, TextAreaField, DateField
from wtforms.validators import DataRequired, Length, Optional, Regexp
from gymflow.utils.common import ApiForm, TIME_PATTERN

class AppointmentForm(ApiForm):
    """Form for booking a new appointment"""
    member_id = IntegerField('Member', validators=[DataRequired(message='Member is required')])
    trainer_id = IntegerField('Trainer', validators=[DataRequired(message='Trainer is required')])
    service_id = IntegerField('Package', validators=[DataRequired(message='Package is required')])
    date = DateField('Date', validators=[DataRequired(message='Date is required')], format='%Y-%m-%d')
    time = StringField('Time', validators=[
        DataRequired(message='Time is required'),
        Regexp(TIME_PATTERN, message='Time must be HH:MM')
    ])
    notes = TextAreaField('Notes', validators=[Optional(), Length(max=500)])

class AppointmentUpdateForm(ApiForm):
    """Form for moving or annotating an existing appointment"""
    trainer_id = IntegerField('Trainer', validators=[Optional()])
    date = DateField('Date', validators=[Optional()], format='%Y-%m-%d')
    time = StringField('Time', validators=[Optional(), Regexp(TIME_PATTERN, message='Time must be HH:MM')])
    notes = TextAreaField('Notes', validators=[Optional(), Length(max=500)])
