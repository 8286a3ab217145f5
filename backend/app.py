from followup import create_app

# create_app já cria as tabelas e o administrador padrão (AUTO_INIT_DB);
# com AUTO_INIT_DB=false use `flask --app app init-db`.
app = create_app()


if __name__ == '__main__':
    # Inicializa o servidor Flask em modo debug
    app.run(debug=app.config.get("DEBUG", False))
