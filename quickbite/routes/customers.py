from flask import Blueprint, request, jsonify
from quickbite.models.models import Customer
from quickbite.models.schemas import CustomerCreate, CustomerUpdate, CustomerRecord
from quickbite.services import crud

customers_bp = Blueprint('customers', __name__)

customer_resource = crud.Resource(
    model=Customer,
    record=CustomerRecord,
    create_schema=CustomerCreate,
    update_schema=CustomerUpdate,
    key='customer',
    label='Customer',
    not_found_code='CUSTOMER_NOT_FOUND',
    search_columns=('name', 'email', 'phone'),
    unique_column='email',
    duplicate_code='DUPLICATE_EMAIL',
    duplicate_message='Email already exists',
)


@customers_bp.route('/api/customers', methods=['GET'])
def get_customers():
    """Get one customer by ?id= or a page of customers"""
    if 'id' in request.args:
        customer = crud.get_or_404(customer_resource, crud.parse_id(request.args))
        return jsonify(customer_resource.serialize(customer))

    customers = crud.list_records(customer_resource, request.args)
    return jsonify([customer_resource.serialize(customer) for customer in customers])


@customers_bp.route('/api/customers', methods=['POST'])
def create_customer():
    """Sign a customer up; emails are stored trimmed and lower-cased"""
    customer = crud.create_record(customer_resource, request.get_json(silent=True))
    return jsonify(customer_resource.serialize(customer)), 201


@customers_bp.route('/api/customers', methods=['PUT'])
def update_customer():
    customer = crud.update_record(customer_resource, crud.parse_id(request.args), request.get_json(silent=True))
    return jsonify(customer_resource.serialize(customer))


@customers_bp.route('/api/customers', methods=['DELETE'])
def delete_customer():
    return jsonify(crud.delete_record(customer_resource, crud.parse_id(request.args)))
