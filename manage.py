from quickbite import create_app, db, socketio
from quickbite.config import DevelopmentConfig
from quickbite.services.seed import seed_sample_data

app = create_app(DevelopmentConfig)

@app.cli.command('setup-db')
def setup_db():
    """Setup database and create tables"""
    db.create_all()
    print("Database tables created!")

@app.cli.command('seed')
def seed():
    """Load a sample shop, menu and offer"""
    if seed_sample_data():
        print("Sample data created!")
    else:
        print("Sample data already exists.")

if __name__ == '__main__':
    socketio.run(app, debug=app.config['DEBUG'])
