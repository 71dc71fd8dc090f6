# File: backend/run.py
"""Application entry point."""
import os
import click
from flask.cli import with_appcontext
from attendpro import create_app, db
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Create Flask app
app = create_app(os.getenv('FLASK_ENV', 'development'))


@app.cli.command()
@with_appcontext
def create_db():
    """Create database tables."""
    db.create_all()
    click.echo('✅ Database tables created successfully!')


@app.cli.command()
@with_appcontext
def drop_db():
    """Drop all database tables."""
    if click.confirm('Are you sure you want to drop all tables?'):
        db.drop_all()
        click.echo('❌ Database tables dropped successfully!')


@app.cli.command()
@with_appcontext
def seed_demo():
    """Create a demo admin and employee."""
    from attendpro.models.user import User, UserRole

    accounts = [
        ('admin', 'admin@attendancepro.com', 'System Administrator', UserRole.ADMIN, 'admin123456'),
        ('employee', 'employee@attendancepro.com', 'Demo Employee', UserRole.EMPLOYEE, 'employee123'),
    ]

    for username, email, full_name, role, password in accounts:
        if User.query.filter_by(username=username).first():
            continue
        user = User(username=username, email=email, full_name=full_name, role=role)
        user.set_password(password)
        db.session.add(user)

    db.session.commit()

    click.echo('✅ Demo users created successfully!')
    click.echo('👤 Admin: admin / admin123456')
    click.echo('👤 Employee: employee / employee123')


if __name__ == '__main__':
    # Development server
    port = int(os.environ.get('PORT', 5000))
    host = os.environ.get('HOST', '127.0.0.1')
    debug = os.environ.get('FLASK_ENV') == 'development'

    app.run(host=host, port=port, debug=debug)
