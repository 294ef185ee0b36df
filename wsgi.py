from voiceforms import create_app

app = create_app()
