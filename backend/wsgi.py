from glassshop import create_app

app = create_app()
