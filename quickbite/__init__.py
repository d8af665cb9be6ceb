from flask import Flask
from flask_cors import CORS
from flask_sqlalchemy import SQLAlchemy
from flask_jwt_extended import JWTManager
from flask_migrate import Migrate
from flask_socketio import SocketIO
from quickbite.config import Config

db = SQLAlchemy()
jwt = JWTManager()
migrate = Migrate()
cors = CORS()
socketio = SocketIO()

def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.logger.setLevel(app.config['LOG_LEVEL'])

    db.init_app(app)
    jwt.init_app(app)
    migrate.init_app(app, db)
    cors.init_app(app, resources={r'/api/*': {'origins': app.config['CORS_ORIGINS']}})
    socketio.init_app(
        app,
        cors_allowed_origins=app.config['CORS_ORIGINS'],
        message_queue=app.config['SOCKETIO_MESSAGE_QUEUE'],
    )

    # Import models to ensure they are registered with SQLAlchemy
    from quickbite.models import models

    from quickbite.errors import register_error_handlers, register_jwt_handlers
    register_error_handlers(app)
    register_jwt_handlers(jwt)

    from quickbite.routes import auth, checkout, customers, dashboard, menu, orders, payments, shops
    app.register_blueprint(shops.shops_bp)
    app.register_blueprint(customers.customers_bp)
    app.register_blueprint(menu.menu_bp)
    app.register_blueprint(orders.orders_bp)
    app.register_blueprint(payments.payments_bp)
    app.register_blueprint(checkout.checkout_bp)
    app.register_blueprint(auth.auth_bp)
    app.register_blueprint(dashboard.dashboard_bp)

    # Live order board
    from quickbite.services.order_events import OrderEventService, register_socket_events
    order_events = OrderEventService(socketio)
    app.order_events = order_events
    register_socket_events(socketio)

    @app.route('/health')
    def health_check():
        return {'status': 'healthy', 'service': 'quickbite-api'}

    return app
