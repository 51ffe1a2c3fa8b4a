from app import create_app, create_default_school_and_admin
from extensions import db

app = create_app()


def main():
    with app.app_context():
        # Create database tables and a default super admin if the database is empty
        db.create_all()
        create_default_school_and_admin(app)

    # This block is for local development only.
    # In production, a WSGI server like Gunicorn (see gunicorn_config.py) is used.
    print("\n" + "=" * 50)
    print("Starting local development server...")
    print("Access the API at: http://127.0.0.1:5001/api")
    print("=" * 50 + "\n")
    app.run(host='127.0.0.1', port=5001, debug=app.config['DEBUG'])


if __name__ == '__main__':
    main()
