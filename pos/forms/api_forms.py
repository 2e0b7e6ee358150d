"""
Forms used to validate JSON/form payloads of the POS endpoints.
"""
from flask import request
from flask_wtf import FlaskForm
from wtforms import DecimalField, IntegerField, SelectField, StringField, TextAreaField
from wtforms.validators import DataRequired, NumberRange, Length, Optional
from pos.exceptions import BusinessLogicError

PAYMENT_METHODS = [
    ('efectivo', 'Efectivo'),
    ('tarjeta', 'Tarjeta'),
    ('transferencia', 'Transferencia'),
]

PURCHASE_STATUSES = [
    ('pending', 'Pendiente'),
    ('completed', 'Completada'),
    ('cancelled', 'Cancelada'),
]


def validate_or_raise(form: FlaskForm) -> None:
    """Validate a submitted form, raising BusinessLogicError with the field errors."""
    if not form.validate_on_submit():
        raise BusinessLogicError('Datos inválidos', payload={'errors': form.errors})


def submitted_data(form: FlaskForm) -> dict:
    """Field values for the keys present in the request payload (partial updates)."""
    payload = request.get_json(silent=True) if request.is_json else request.form
    keys = set(payload or ())
    return {field.name: field.data for field in form
            if field.name in keys and field.name != 'csrf_token'}


class ProductForm(FlaskForm):
    """Product create form."""

    name = StringField('Nombre', validators=[DataRequired(message='El nombre es obligatorio'), Length(max=200)])
    barcode = StringField('Código de barras', validators=[Optional(), Length(max=64)])
    internal_code = StringField('Código interno', validators=[Optional(), Length(max=64)])
    description = TextAreaField('Descripción', validators=[Optional()])
    category = StringField('Categoría', validators=[Optional(), Length(max=100)])
    unit = StringField('Unidad', validators=[Optional(), Length(max=30)])
    purchase_price = DecimalField('Precio de compra', places=2,
                                  validators=[Optional(), NumberRange(min=0)])
    selling_price = DecimalField('Precio de venta', places=2,
                                 validators=[Optional(), NumberRange(min=0)])
    current_stock = IntegerField('Stock actual', validators=[Optional()])
    min_stock = IntegerField('Stock mínimo', validators=[Optional(), NumberRange(min=0)])
    image_url = StringField('Imagen', validators=[Optional(), Length(max=500)])


class ProductUpdateForm(ProductForm):
    """Product partial update form."""

    name = StringField('Nombre', validators=[Optional(), Length(max=200)])


class CustomerForm(FlaskForm):
    """Customer create form."""

    name = StringField('Nombre', validators=[DataRequired(message='El nombre es obligatorio'), Length(max=200)])
    tax_id = StringField('RFC', validators=[Optional(), Length(max=50)])
    email = StringField('Email', validators=[Optional(), Length(max=255)])
    phone = StringField('Teléfono', validators=[Optional(), Length(max=50)])
    postal_code = StringField('Código postal', validators=[Optional(), Length(max=20)])
    address = TextAreaField('Dirección', validators=[Optional()])
    tax_regime = StringField('Régimen fiscal', validators=[Optional(), Length(max=120)])
    invoice_usage = StringField('Uso de CFDI', validators=[Optional(), Length(max=120)])


class CustomerUpdateForm(CustomerForm):
    """Customer partial update form."""

    name = StringField('Nombre', validators=[Optional(), Length(max=200)])


class CartItemForm(FlaskForm):
    """Add a product to the cart."""

    product_id = IntegerField('Producto', validators=[DataRequired(message='El producto es obligatorio')])
    quantity = IntegerField('Cantidad', default=1,
                            validators=[Optional(), NumberRange(min=1, message='La cantidad debe ser al menos 1')])


class CartLineForm(FlaskForm):
    """Change the quantity and/or the charged price of a cart line."""

    quantity = IntegerField('Cantidad', validators=[Optional(), NumberRange(min=0)])
    price = DecimalField('Precio', places=2, validators=[Optional(), NumberRange(min=0)])


class CheckoutForm(FlaskForm):
    """Finalize the cart."""

    payment_method = SelectField('Método de pago', choices=PAYMENT_METHODS, default='efectivo',
                                 validators=[DataRequired(message='El método de pago es obligatorio')])
    customer_id = IntegerField('Cliente', validators=[Optional()])
    cash_received = DecimalField('Efectivo recibido', places=2, validators=[Optional(), NumberRange(min=0)])


class PurchaseForm(FlaskForm):
    """Purchase header; items are validated by the purchase service."""

    supplier = StringField('Proveedor', validators=[DataRequired(message='El proveedor es obligatorio'),
                                                    Length(max=200)])
    status = SelectField('Estado', choices=PURCHASE_STATUSES, default='pending', validators=[Optional()])


class PurchaseUpdateForm(PurchaseForm):
    """Purchase partial update form."""

    supplier = StringField('Proveedor', validators=[Optional(), Length(max=200)])
