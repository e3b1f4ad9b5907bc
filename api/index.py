# Q&A Forum API - deployment entry point
# File: api/index.py (for Vercel deployment)

from qaforum import create_app

app = create_app()

if __name__ == '__main__':
    app.run(host='0.0.0.0', port=app.config['PORT'], debug=False)
