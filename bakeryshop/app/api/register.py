from flask import Flask

from bakeryshop.modules.auth.routes import bp as auth_bp
from bakeryshop.modules.orders.routes import bp as orders_bp
from bakeryshop.modules.admin.routes import bp as admin_bp


def register_api_blueprints(app: Flask) -> None:
    app.register_blueprint(auth_bp, url_prefix="/api")
    app.register_blueprint(orders_bp, url_prefix="/api")
    app.register_blueprint(admin_bp, url_prefix="/api")

    # Root API document
    @app.get("/api")
    def api_index():
        return {
            "name": "Bakery Shop API",
            "version": "0.1.0",
            "endpoints": {
                "auth": ["/register", "/login", "/logout", "/auth/status", "/user"],
                "orders": ["/orders", "/orders/<id>"],
                "admin": ["/admin/database", "/admin/mark-delivered"],
            },
        }, 200
