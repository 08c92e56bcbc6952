from alembic import op
import sqlalchemy as sa

revision = '0001_init_schema'
down_revision = None
branch_labels = None
depends_on = None


def _activo(name='activo'):
    return sa.Column(name, sa.Boolean(), nullable=False, server_default=sa.true())


def upgrade():
    op.create_table(
        'usuarios',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('nombre', sa.String(120), nullable=True),
        sa.Column('apellido', sa.String(120), nullable=True),
        sa.Column('tipo_usuario', sa.String(30), nullable=True),
        _activo(),
        sa.Column('creado_en', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        'usuario_roles',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('usuario_id', sa.Uuid(), sa.ForeignKey('usuarios.id', ondelete='CASCADE'), nullable=False),
        sa.Column('rol', sa.String(30), nullable=False),
        _activo(),
        sa.Column('fecha_asignacion', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('usuario_id', 'rol', name='uq_usuario_roles_usuario_rol'),
    )
    op.create_index('ix_usuario_roles_usuario_id', 'usuario_roles', ['usuario_id'])

    op.create_table(
        'facultades',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('nombre', sa.String(200), nullable=False),
        sa.Column('codigo', sa.String(30), nullable=True, unique=True),
    )

    op.create_table(
        'carreras',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('nombre', sa.String(200), nullable=False),
        sa.Column('codigo', sa.String(30), nullable=True, unique=True),
        sa.Column('facultad_id', sa.Integer, sa.ForeignKey('facultades.id', ondelete='SET NULL'), nullable=True),
        _activo('activa'),
    )
    op.create_index('ix_carreras_facultad_id', 'carreras', ['facultad_id'])

    op.create_table(
        'periodos_academicos',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('codigo', sa.String(10), nullable=False, unique=True),
        sa.Column('anio', sa.Integer, nullable=False),
        sa.Column('semestre', sa.Integer, nullable=False),
        sa.Column('fecha_inicio', sa.Date(), nullable=True),
        sa.Column('fecha_fin', sa.Date(), nullable=True),
        _activo(),
    )

    op.create_table(
        'cursos',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('nombre', sa.String(200), nullable=False),
        sa.Column('codigo', sa.String(30), nullable=True),
        sa.Column('creditos', sa.Integer, nullable=True),
        sa.Column('carrera_id', sa.Integer, sa.ForeignKey('carreras.id', ondelete='RESTRICT'), nullable=True),
    )
    op.create_index('ix_cursos_carrera_id', 'cursos', ['carrera_id'])

    op.create_table(
        'grupos',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('curso_id', sa.Integer, sa.ForeignKey('cursos.id', ondelete='CASCADE'), nullable=False),
        sa.Column('periodo_id', sa.Integer, sa.ForeignKey('periodos_academicos.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('numero_grupo', sa.String(10), nullable=False),
        sa.Column('horario', sa.String(120), nullable=True),
        sa.Column('aula', sa.String(60), nullable=True),
        sa.UniqueConstraint('curso_id', 'periodo_id', 'numero_grupo', name='uq_grupo_curso_periodo_numero'),
    )
    op.create_index('ix_grupos_curso_id', 'grupos', ['curso_id'])
    op.create_index('ix_grupos_periodo_id', 'grupos', ['periodo_id'])

    op.create_table(
        'profesores',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('usuario_id', sa.Uuid(), sa.ForeignKey('usuarios.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('carrera_id', sa.Integer, sa.ForeignKey('carreras.id', ondelete='SET NULL'), nullable=True),
        sa.Column('codigo_profesor', sa.String(30), nullable=True),
        _activo(),
    )
    op.create_index('ix_profesores_carrera_id', 'profesores', ['carrera_id'])

    op.create_table(
        'estudiantes',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('usuario_id', sa.Uuid(), sa.ForeignKey('usuarios.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('carrera_id', sa.Integer, sa.ForeignKey('carreras.id', ondelete='SET NULL'), nullable=True),
        sa.Column('codigo_estudiante', sa.String(30), nullable=True),
        _activo(),
    )
    op.create_index('ix_estudiantes_carrera_id', 'estudiantes', ['carrera_id'])

    op.create_table(
        'coordinadores',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('usuario_id', sa.Uuid(), sa.ForeignKey('usuarios.id', ondelete='CASCADE'), nullable=False),
        sa.Column('carrera_id', sa.Integer, sa.ForeignKey('carreras.id', ondelete='CASCADE'), nullable=False),
        sa.Column('departamento', sa.String(200), nullable=True),
        sa.Column('fecha_nombramiento', sa.DateTime(timezone=True), server_default=sa.func.now()),
        _activo(),
        sa.UniqueConstraint('usuario_id', 'carrera_id', name='uq_coordinador_usuario_carrera'),
    )
    op.create_index('ix_coordinadores_usuario_id', 'coordinadores', ['usuario_id'])
    op.create_index('ix_coordinadores_carrera_id', 'coordinadores', ['carrera_id'])

    op.create_table(
        'decanos',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('usuario_id', sa.Uuid(), sa.ForeignKey('usuarios.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('facultad_id', sa.Integer, sa.ForeignKey('facultades.id', ondelete='SET NULL'), nullable=True),
        sa.Column('fecha_nombramiento', sa.DateTime(timezone=True), server_default=sa.func.now()),
        _activo(),
    )

    op.create_table(
        'asignaciones_profesor',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('profesor_id', sa.Integer, sa.ForeignKey('profesores.id', ondelete='CASCADE'), nullable=False),
        sa.Column('curso_id', sa.Integer, sa.ForeignKey('cursos.id', ondelete='CASCADE'), nullable=False),
        sa.Column('grupo_id', sa.Integer, sa.ForeignKey('grupos.id', ondelete='CASCADE'), nullable=False),
        _activo(),
        sa.UniqueConstraint('profesor_id', 'grupo_id', name='uq_asignacion_profesor_grupo'),
    )
    op.create_index('ix_asignaciones_profesor_profesor_id', 'asignaciones_profesor', ['profesor_id'])
    op.create_index('ix_asignaciones_profesor_curso_id', 'asignaciones_profesor', ['curso_id'])
    op.create_index('ix_asignaciones_profesor_grupo_id', 'asignaciones_profesor', ['grupo_id'])

    op.create_table(
        'inscripciones',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('estudiante_id', sa.Integer, sa.ForeignKey('estudiantes.id', ondelete='CASCADE'), nullable=False),
        sa.Column('grupo_id', sa.Integer, sa.ForeignKey('grupos.id', ondelete='CASCADE'), nullable=False),
        _activo('activa'),
        sa.UniqueConstraint('estudiante_id', 'grupo_id', name='uq_inscripcion_estudiante_grupo'),
    )
    op.create_index('ix_inscripciones_estudiante_id', 'inscripciones', ['estudiante_id'])
    op.create_index('ix_inscripciones_grupo_id', 'inscripciones', ['grupo_id'])

    op.create_table(
        'categorias_pregunta',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('nombre', sa.String(120), nullable=False, unique=True),
        sa.Column('descripcion', sa.Text(), nullable=True),
        sa.Column('orden', sa.Integer, nullable=False, server_default='0'),
    )

    op.create_table(
        'preguntas_evaluacion',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('categoria_id', sa.Integer, sa.ForeignKey('categorias_pregunta.id', ondelete='SET NULL'), nullable=True),
        sa.Column('texto_pregunta', sa.Text(), nullable=False),
        sa.Column('descripcion', sa.Text(), nullable=True),
        sa.Column('tipo_pregunta', sa.String(20), nullable=False, server_default='likert'),
        sa.Column('opciones', sa.JSON(), nullable=True),
        sa.Column('obligatoria', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('orden', sa.Integer, nullable=False, server_default='0'),
        _activo('activa'),
        sa.Column('id_carrera', sa.Integer, sa.ForeignKey('carreras.id', ondelete='CASCADE'), nullable=True),
    )
    op.create_index('ix_preguntas_evaluacion_id_carrera', 'preguntas_evaluacion', ['id_carrera'])

    op.create_table(
        'evaluaciones',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('estudiante_id', sa.Integer, sa.ForeignKey('estudiantes.id', ondelete='SET NULL'), nullable=True),
        sa.Column('profesor_id', sa.Integer, sa.ForeignKey('profesores.id', ondelete='CASCADE'), nullable=False),
        sa.Column('grupo_id', sa.Integer, sa.ForeignKey('grupos.id', ondelete='CASCADE'), nullable=False),
        sa.Column('periodo_id', sa.Integer, sa.ForeignKey('periodos_academicos.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('calificacion_general', sa.Float(), nullable=False),
        sa.Column('comentarios', sa.Text(), nullable=True),
        sa.Column('fecha_creacion', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint(
            'estudiante_id', 'profesor_id', 'grupo_id', 'periodo_id',
            name='uq_evaluacion_estudiante_profesor_grupo_periodo',
        ),
        sa.CheckConstraint(
            'calificacion_general >= 1 AND calificacion_general <= 5',
            name='ck_evaluacion_calificacion_rango',
        ),
    )
    op.create_index('ix_evaluaciones_estudiante_id', 'evaluaciones', ['estudiante_id'])
    op.create_index('ix_evaluaciones_profesor_id', 'evaluaciones', ['profesor_id'])
    op.create_index('ix_evaluaciones_grupo_id', 'evaluaciones', ['grupo_id'])
    op.create_index('ix_evaluaciones_periodo_id', 'evaluaciones', ['periodo_id'])
    op.create_index('ix_evaluaciones_fecha_creacion', 'evaluaciones', ['fecha_creacion'])

    op.create_table(
        'respuestas_evaluacion',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('evaluacion_id', sa.Integer, sa.ForeignKey('evaluaciones.id', ondelete='CASCADE'), nullable=False),
        sa.Column('pregunta_id', sa.Integer, sa.ForeignKey('preguntas_evaluacion.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('calificacion', sa.Integer, nullable=True),
        sa.Column('respuesta_texto', sa.Text(), nullable=True),
        sa.Column('opcion_seleccionada', sa.String(200), nullable=True),
        sa.UniqueConstraint('evaluacion_id', 'pregunta_id', name='uq_respuesta_evaluacion_pregunta'),
    )
    op.create_index('ix_respuestas_evaluacion_evaluacion_id', 'respuestas_evaluacion', ['evaluacion_id'])

    op.create_table(
        'audit_logs',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), nullable=True),
        sa.Column('accion', sa.String(), nullable=False),
        sa.Column('payload', sa.JSON(), nullable=True),
        sa.Column('ip', sa.String(), nullable=True),
        sa.Column('ua', sa.Text(), nullable=True),
        sa.Column('creado_en', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
    )
    op.create_index('ix_audit_logs_user_id', 'audit_logs', ['user_id'])


def downgrade():
    for table in (
        'audit_logs', 'respuestas_evaluacion', 'evaluaciones', 'preguntas_evaluacion',
        'categorias_pregunta', 'inscripciones', 'asignaciones_profesor', 'decanos',
        'coordinadores', 'estudiantes', 'profesores', 'grupos', 'cursos',
        'periodos_academicos', 'carreras', 'facultades', 'usuario_roles', 'usuarios',
    ):
        op.drop_table(table)
