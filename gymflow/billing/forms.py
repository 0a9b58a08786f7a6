from wtforms import DecimalField, DateField, SelectMultipleField, StringField
from wtforms.validators import Optional, NumberRange, Length, ValidationError
from gymflow.utils.common import ApiForm

class PaymentForm(ApiForm):
    """Form for paying for one or more packages by card and/or cash"""
    service_ids = SelectMultipleField('Packages', coerce=int, choices=[], validate_choice=False)
    credit_card_paid = DecimalField('Credit Card', validators=[
        Optional(),
        NumberRange(min=0, message='Amount cannot be negative')
    ], default=0)
    cash_paid = DecimalField('Cash', validators=[
        Optional(),
        NumberRange(min=0, message='Amount cannot be negative')
    ], default=0)
    payment_date = DateField('Payment Date', validators=[Optional()], format='%Y-%m-%d')

    def validate_service_ids(self, service_ids):
        if not service_ids.data:
            raise ValidationError('At least one package must be selected.')

class PaymentUpdateForm(ApiForm):
    """Form for correcting a stored payment record"""
    package_name = StringField('Package', validators=[Optional(), Length(min=1, max=100)])
    credit_card_paid = DecimalField('Credit Card', validators=[
        Optional(),
        NumberRange(min=0, message='Amount cannot be negative')
    ])
    cash_paid = DecimalField('Cash', validators=[
        Optional(),
        NumberRange(min=0, message='Amount cannot be negative')
    ])
    payment_date = DateField('Payment Date', validators=[Optional()], format='%Y-%m-%d')
